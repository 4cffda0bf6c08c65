"""
Các loại lỗi của cart store và storage adapter.

Mỗi loại có ``error_code`` cố định và ``status_code`` HTTP mà tầng host trả về.
"""


class CartError(Exception):
    """Lỗi gốc của cart store"""

    error_code = "CART_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error_code, "detail": self.message}


class InvalidArgument(CartError):
    """Dữ liệu đầu vào vi phạm ràng buộc; không có gì được ghi"""

    error_code = "INVALID_ARGUMENT"
    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFound(CartError):
    """Không có cart item với id này"""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, item_id: int):
        super().__init__(f"cart item {item_id} not found")
        self.item_id = item_id


class StorageBusy(CartError):
    """Tranh chấp ghi vượt quá số lần thử lại"""

    error_code = "STORAGE_BUSY"
    status_code = 503


class StorageUnavailable(CartError):
    """File DB không mở được, hỏng, hoặc handle đã đóng"""

    error_code = "STORAGE_UNAVAILABLE"
    status_code = 500
