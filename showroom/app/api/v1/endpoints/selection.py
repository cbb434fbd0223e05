from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_auth_session, get_db, get_shop_session, peek_shop_session
from showroom.app.api.v1.endpoints.cart import serialize_cart
from showroom.app.api.v1.endpoints.catalog import load_priced_product
from showroom.app.schemas.cart import CartRead, SelectionRead
from showroom.services.cart import ShopSession
from showroom.services.errors import (
    InsufficientStock,
    InvalidSelection,
    NegativeQuantity,
    NoSelection,
)
from showroom.services.navigation import AuthSession
from showroom.services.selection import SelectionMatrix

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/selection")


# ---------- Schemas ----------
class CellQuantity(BaseModel):
    color: str = Field(min_length=1)
    size: str = Field(min_length=1)
    quantity: int


# ---------- Helpers ----------
def _serialize(product_id: int, matrix: SelectionMatrix) -> SelectionRead:
    totals = matrix.totals()
    return SelectionRead(
        product_id=product_id,
        pending={f"{color}|{size}": qty for (color, size), qty in matrix.pending().items()},
        total_pairs=totals.total_pairs,
        total_price=totals.total_price,
    )


def _current_matrix(
    db: Session,
    shop: ShopSession,
    auth: AuthSession,
    product_id: int,
    price_list_id: int | None,
    customer_id: int | None,
) -> SelectionMatrix:
    """
    Grid for this request. Product, stock and price are re-read every time;
    the session only keeps the pending quantities.
    """
    product = load_priced_product(db, product_id, auth, price_list_id, customer_id)

    matrix = shop.selections.get(product_id)
    if matrix is None:
        return SelectionMatrix.build(product)

    matrix.refresh(product)
    return matrix


# ---------- Endpoints ----------
@router.get("/{product_id}", response_model=SelectionRead)
def get_selection(
    product_id: int,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    shop: ShopSession = Depends(peek_shop_session),
    auth: AuthSession = Depends(get_auth_session),
):
    matrix = _current_matrix(db, shop, auth, product_id, price_list_id, customer_id)
    return _serialize(product_id, matrix)


@router.put("/{product_id}", response_model=SelectionRead)
def set_cell_quantity(
    product_id: int,
    payload: CellQuantity,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    shop: ShopSession = Depends(get_shop_session),
    auth: AuthSession = Depends(get_auth_session),
):
    matrix = _current_matrix(db, shop, auth, product_id, price_list_id, customer_id)

    try:
        matrix.set_quantity(payload.color, payload.size, payload.quantity)
    except InvalidSelection as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except NegativeQuantity as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except InsufficientStock as exc:
        raise HTTPException(
            status_code=409,
            detail={"message": f"Insufficient stock (available={exc.available})", "available": exc.available},
        )

    shop.selections[product_id] = matrix
    return _serialize(product_id, matrix)


@router.post("/{product_id}/commit", response_model=CartRead)
def commit_selection(
    product_id: int,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    shop: ShopSession = Depends(peek_shop_session),
    auth: AuthSession = Depends(get_auth_session),
):
    if product_id not in shop.selections:
        raise HTTPException(status_code=400, detail=str(NoSelection()))

    # stock and price as they are now, not as they were when the grid was opened
    matrix = _current_matrix(db, shop, auth, product_id, price_list_id, customer_id)

    try:
        items = matrix.commit()
    except NoSelection as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # a draft that cannot merge leaves the cart as it was
    snapshot = [replace(line) for line in shop.cart]
    try:
        for item in items:
            shop.cart.add(item)
    except InvalidSelection as exc:
        shop.cart.clear()
        for line in snapshot:
            shop.cart.add(line)
        raise HTTPException(status_code=409, detail=str(exc))

    del shop.selections[product_id]
    logger.info("Selection committed product_id=%s lines=%s", product_id, len(items))
    return serialize_cart(shop.cart)
