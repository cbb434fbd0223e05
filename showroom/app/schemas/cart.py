from decimal import Decimal

from pydantic import BaseModel


class CartLineRead(BaseModel):
    index: int
    product_id: int
    variant_id: int
    name: str
    unit_price: Decimal
    image_ref: str
    size: str
    color: str
    quantity: int
    subtotal: Decimal


class CartRead(BaseModel):
    lines: list[CartLineRead]
    total: Decimal
    item_count: int


class SelectionRead(BaseModel):
    product_id: int
    pending: dict[str, int]  # "{color}|{size}" -> quantity
    total_pairs: int
    total_price: Decimal
