from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from showroom.app.api.deps import peek_shop_session
from showroom.app.schemas.cart import CartLineRead, CartRead
from showroom.services.cart import Cart, ShopSession
from showroom.services.errors import IndexOutOfRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart")


def serialize_cart(cart: Cart) -> CartRead:
    return CartRead(
        lines=[
            CartLineRead(
                index=idx,
                product_id=line.product_id,
                variant_id=line.variant_id,
                name=line.name,
                unit_price=line.unit_price,
                image_ref=line.image_ref,
                size=line.size,
                color=line.color,
                quantity=line.quantity,
                subtotal=line.subtotal,
            )
            for idx, line in enumerate(cart)
        ],
        total=cart.total,
        item_count=cart.item_count,
    )


@router.get("", response_model=CartRead)
def get_cart(shop: ShopSession = Depends(peek_shop_session)):
    return serialize_cart(shop.cart)


@router.delete("/lines/{index}", response_model=CartRead)
def remove_line(index: int, shop: ShopSession = Depends(peek_shop_session)):
    try:
        shop.cart.remove(index)
    except IndexOutOfRange as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return serialize_cart(shop.cart)


@router.delete("", response_model=CartRead)
def clear_cart(shop: ShopSession = Depends(peek_shop_session)):
    shop.cart.clear()
    return serialize_cart(shop.cart)
