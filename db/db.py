import logging
import random
import sqlite3
import threading
import time
from dataclasses import dataclass

from core.config import DB_WRITE_RETRIES, DB_WRITE_TIMEOUT, DB_BUSY_TIMEOUT, DB_BACKOFF_BASE
from core.errors import InvalidArgument, StorageBusy, StorageUnavailable

logger = logging.getLogger(__name__)

SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS cart_items (
  id         INTEGER PRIMARY KEY AUTOINCREMENT,   -- AUTOINCREMENT: id đã xoá không bao giờ cấp lại
  productId  TEXT NOT NULL,
  name       TEXT NOT NULL,
  price      REAL NOT NULL CHECK (price >= 0)
);
"""

_TRANSIENT_MARKERS = ("locked", "busy")

# Lỗi khi bind tham số (int > 2**63, chuỗi có surrogate lẻ, kiểu không hỗ trợ)
_BIND_ERRORS = (ValueError, OverflowError, TypeError)


@dataclass(frozen=True)
class WriteResult:
    rows_affected: int
    last_row_id: int | None


def _is_transient(exc: sqlite3.OperationalError) -> bool:
    msg = str(exc).lower()
    return any(m in msg for m in _TRANSIENT_MARKERS)


def connect(db_path: str, busy_timeout: float = DB_BUSY_TIMEOUT) -> sqlite3.Connection:
    """Mở kết nối SQLite ở chế độ autocommit, row_factory=Row. Không tự tạo thư mục cha."""
    con = sqlite3.connect(db_path, timeout=busy_timeout, check_same_thread=False, isolation_level=None)
    con.row_factory = sqlite3.Row
    return con


class Database:
    """
    Handle giữ file DB của giỏ hàng.

    Một kết nối ghi dùng chung, có lock bảo vệ: mỗi thời điểm process này chỉ có
    tối đa 1 transaction ghi. Nếu handle/process khác đang giữ khoá file thì thử
    lại với backoff ngẫu nhiên ngắn. Đọc dùng kết nối riêng, chỉ thấy dữ liệu đã commit.
    """

    def __init__(
        self,
        path: str,
        write_retries: int = DB_WRITE_RETRIES,
        write_timeout: float = DB_WRITE_TIMEOUT,
        busy_timeout: float = DB_BUSY_TIMEOUT,
        backoff_base: float = DB_BACKOFF_BASE,
    ):
        self.path = str(path)
        self.write_retries = write_retries
        self.write_timeout = write_timeout
        self.busy_timeout = busy_timeout
        self.backoff_base = backoff_base
        self._write_lock = threading.Lock()
        self._con: sqlite3.Connection | None = None

    @classmethod
    def open(cls, path: str, **options) -> "Database":
        db = cls(path, **options)
        db._open()
        return db

    def _open(self) -> None:
        con = None
        try:
            con = connect(self.path, self.busy_timeout)
            con.executescript(SCHEMA)
        except sqlite3.Error as exc:
            if con is not None:
                con.close()
            logger.error("cannot open database %s: %s", self.path, exc)
            raise StorageUnavailable(f"cannot open database {self.path}: {exc}") from exc
        self._con = con
        logger.info("opened database %s", self.path)

    @property
    def closed(self) -> bool:
        return self._con is None

    def close(self) -> None:
        with self._write_lock:
            if self._con is None:
                return
            self._con.close()
            self._con = None
        logger.info("closed database %s", self.path)

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _writer(self) -> sqlite3.Connection:
        if self._con is None:
            raise StorageUnavailable(f"database {self.path} is closed")
        return self._con

    def execute_write(self, statement: str, params=(), timeout: float | None = None) -> WriteResult:
        """
        Chạy 1 câu INSERT/DELETE trong transaction riêng.

        Hết lượt thử hoặc hết timeout -> StorageBusy; lỗi engine không tạm thời
        -> StorageUnavailable; tham số không bind được -> InvalidArgument.
        Lỗi gì thì transaction cũng được rollback trước khi ném ra.
        """
        budget = self.write_timeout if timeout is None else timeout
        deadline = time.monotonic() + budget

        if not self._write_lock.acquire(timeout=max(budget, 0)):
            logger.error("write lock not acquired within %.2fs", budget)
            raise StorageBusy(f"write lock not acquired within {budget:.2f}s")
        try:
            attempt = 0
            while True:
                con = self._writer()
                try:
                    con.execute("BEGIN IMMEDIATE")
                    cur = con.execute(statement, params)
                    con.execute("COMMIT")
                    return WriteResult(cur.rowcount, cur.lastrowid)
                except sqlite3.OperationalError as exc:
                    self._rollback(con)
                    if not _is_transient(exc):
                        logger.error("write failed on %s: %s", self.path, exc)
                        raise StorageUnavailable(str(exc)) from exc
                    remaining = deadline - time.monotonic()
                    if attempt >= self.write_retries or remaining <= 0:
                        logger.error("write gave up after %d retries: %s", attempt, exc)
                        raise StorageBusy(f"database busy after {attempt} retries") from exc
                    delay = min(random.uniform(0, self.backoff_base * 2 ** attempt), remaining)
                    attempt += 1
                    logger.warning("database locked, retry %d/%d in %.3fs", attempt, self.write_retries, delay)
                    time.sleep(delay)
                except sqlite3.Error as exc:
                    self._rollback(con)
                    logger.error("write failed on %s: %s", self.path, exc)
                    raise StorageUnavailable(str(exc)) from exc
                except _BIND_ERRORS as exc:
                    self._rollback(con)
                    raise InvalidArgument(f"cannot store parameters: {exc}") from exc
                except BaseException:
                    self._rollback(con)
                    raise
        finally:
            self._write_lock.release()

    @staticmethod
    def _rollback(con: sqlite3.Connection) -> None:
        if con.in_transaction:
            try:
                con.execute("ROLLBACK")
            except sqlite3.Error:
                logger.exception("rollback failed")

    def query(self, statement: str, params=()) -> list[sqlite3.Row]:
        """Đọc trên một kết nối riêng; chỉ thấy dữ liệu đã commit."""
        if self._con is None:
            raise StorageUnavailable(f"database {self.path} is closed")
        try:
            con = connect(self.path, self.write_timeout)
        except sqlite3.Error as exc:
            raise StorageUnavailable(str(exc)) from exc
        try:
            return con.execute(statement, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("query failed on %s: %s", self.path, exc)
            raise StorageUnavailable(str(exc)) from exc
        except _BIND_ERRORS as exc:
            raise InvalidArgument(f"cannot bind parameters: {exc}") from exc
        finally:
            con.close()


def open_db(path: str, **options) -> Database:
    """Mở (hoặc tạo) file DB và tạo bảng nếu chưa có."""
    return Database.open(path, **options)
