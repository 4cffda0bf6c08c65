import logging
import math
import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real

from core.errors import InvalidArgument, NotFound
from .db import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartItem:
    id: int
    product_id: str
    name: str
    price: float

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "CartItem":
        return cls(id=row["id"], product_id=row["productId"], name=row["name"], price=row["price"])

    def to_dict(self) -> dict:
        return {"id": self.id, "productId": self.product_id, "name": self.name, "price": self.price}


# Giới hạn INTEGER của SQLite (int64 có dấu)
_MAX_ROW_ID = 2 ** 63 - 1


def _require_text(value, field: str, strip: bool = False) -> str:
    text = value.strip() if strip and isinstance(value, str) else value
    if not isinstance(text, str) or not text:
        raise InvalidArgument(f"{field} must be a non-empty string", field=field)
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidArgument(f"{field} must be valid unicode text", field=field) from exc
    return value


def _require_price(value) -> float:
    # bool là subclass của int, không chấp nhận
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        raise InvalidArgument("price must be a number", field="price")
    try:
        price = float(value)
    except (ValueError, OverflowError) as exc:  # Decimal("sNaN"), 10**400
        raise InvalidArgument("price must be a finite number >= 0", field="price") from exc
    if not math.isfinite(price) or price < 0:
        raise InvalidArgument("price must be a finite number >= 0", field="price")
    return price


def add_item(db: Database, product_id: str, name: str, price: float) -> CartItem:
    """
    Thêm 1 dòng vào giỏ. Kiểm tra input trước khi chạm vào DB;
    id do SQLite cấp (AUTOINCREMENT). productId là chuỗi opaque: chỉ cần khác rỗng.
    """
    product_id = _require_text(product_id, "productId")
    name = _require_text(name, "name", strip=True)
    price = _require_price(price)

    res = db.execute_write(
        "INSERT INTO cart_items(productId, name, price) VALUES(?, ?, ?)",
        (product_id, name, price),
    )
    item = CartItem(id=res.last_row_id, product_id=product_id, name=name, price=price)
    logger.info("added cart item %s (product %s)", item.id, product_id)
    return item


def list_items(db: Database) -> list[CartItem]:
    rows = db.query("SELECT id, productId, name, price FROM cart_items ORDER BY id ASC")
    return [CartItem.from_row(r) for r in rows]


def remove_item(db: Database, item_id: int) -> None:
    if isinstance(item_id, bool) or not isinstance(item_id, int):
        raise InvalidArgument("id must be an integer", field="id")
    # id ngoài khoảng int64 không thể tồn tại
    if not 0 < item_id <= _MAX_ROW_ID:
        raise NotFound(item_id)

    res = db.execute_write("DELETE FROM cart_items WHERE id = ?", (item_id,))
    if res.rows_affected == 0:
        raise NotFound(item_id)
    logger.info("removed cart item %s", item_id)
