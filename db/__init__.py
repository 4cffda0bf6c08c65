from .db import (
    SCHEMA,
    Database,
    WriteResult,
    connect,
    open_db,
)
from .repo import (
    CartItem,
    add_item,
    list_items,
    remove_item,
)

__all__ = [
    # low-level
    "SCHEMA", "Database", "WriteResult", "connect", "open_db",
    # cart store
    "CartItem", "add_item", "list_items", "remove_item",
]
