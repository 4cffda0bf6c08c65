from .config import (
    BASE, DB_PATH, DB_WRITE_RETRIES, DB_WRITE_TIMEOUT, DB_BUSY_TIMEOUT,
    DB_BACKOFF_BASE, LOG_LEVEL,
)
from .errors import CartError, InvalidArgument, NotFound, StorageBusy, StorageUnavailable
from .log import setup_logging
from .time import now_iso

__all__ = [
    "BASE", "DB_PATH", "DB_WRITE_RETRIES", "DB_WRITE_TIMEOUT", "DB_BUSY_TIMEOUT",
    "DB_BACKOFF_BASE", "LOG_LEVEL",
    "CartError", "InvalidArgument", "NotFound", "StorageBusy", "StorageUnavailable",
    "setup_logging", "now_iso",
]
