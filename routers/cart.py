# routers/cart.py
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from core.errors import StorageUnavailable
from core.time import now_iso
from db import Database, add_item, list_items, remove_item

router = APIRouter()


def get_db(request: Request) -> Database:
    return request.app.state.db


class CartItemIn(BaseModel):
    # Ràng buộc (name rỗng, price âm) do cart store kiểm tra để trả 400
    product_id: Any = Field(None, alias="productId")
    name: Any = None
    price: Any = None


class CartItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_id: str = Field(alias="productId")
    name: str
    price: float


@router.post("/cart", status_code=201, response_model=CartItemOut)
def add_to_cart(payload: CartItemIn, db: Database = Depends(get_db)):
    item = add_item(db, payload.product_id, payload.name, payload.price)
    return item.to_dict()


@router.get("/cart", response_model=list[CartItemOut])
def get_cart(db: Database = Depends(get_db)):
    return [item.to_dict() for item in list_items(db)]


@router.delete("/cart/{item_id}", status_code=204)
def delete_item(item_id: int, db: Database = Depends(get_db)):
    remove_item(db, item_id)
    return Response(status_code=204)


@router.get("/health")
def health(db: Database = Depends(get_db)):
    try:
        db.query("SELECT 1")
    except StorageUnavailable as e:
        return JSONResponse(status_code=503, content={"status": "unavailable", "detail": e.message, "time": now_iso()})
    return {"status": "ok", "time": now_iso()}
