from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_db, require_route
from showroom.app.db.models.models_v1 import PriceList, PriceListItem, Product
from showroom.services.navigation import Principal

router = APIRouter(prefix="/price-lists")

gate = require_route("/admin/price-lists")


class PriceListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    currency: str = Field(default="MXN", min_length=3, max_length=3)
    is_default: bool = False


class PriceUpsert(BaseModel):
    product_id: int
    price: Decimal = Field(ge=0)


def _get_price_list(db: Session, price_list_id: int, company_id: str) -> PriceList:
    pl = db.get(PriceList, price_list_id)
    if not pl or pl.company_id != company_id:
        raise HTTPException(status_code=404, detail="Price list not found")
    return pl


@router.get("")
def list_price_lists(db: Session = Depends(get_db), principal: Principal = Depends(gate)):
    rows = db.execute(
        select(PriceList)
        .where(PriceList.company_id == principal.company_id)
        .order_by(PriceList.name)
    ).scalars().all()
    return [
        {"id": pl.id, "name": pl.name, "currency": pl.currency, "is_default": pl.is_default}
        for pl in rows
    ]


@router.post("")
def create_price_list(
    payload: PriceListCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    exists = db.execute(
        select(PriceList)
        .where(PriceList.company_id == principal.company_id)
        .where(PriceList.name == payload.name)
    ).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="Price list already exists")

    if payload.is_default:
        # one default list per company
        for other in db.execute(
            select(PriceList).where(PriceList.company_id == principal.company_id)
        ).scalars():
            other.is_default = False

    pl = PriceList(
        company_id=principal.company_id,
        name=payload.name,
        currency=payload.currency.upper(),
        is_default=payload.is_default,
    )
    db.add(pl)
    db.commit()
    db.refresh(pl)
    return {"id": pl.id, "name": pl.name}


@router.get("/{price_list_id}/items")
def list_items(
    price_list_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    pl = _get_price_list(db, price_list_id, principal.company_id)
    return [{"product_id": it.product_id, "price": it.price} for it in pl.items]


@router.post("/{price_list_id}/items")
def upsert_item(
    price_list_id: int,
    payload: PriceUpsert,
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    _get_price_list(db, price_list_id, principal.company_id)

    product = db.get(Product, payload.product_id)
    if not product or product.company_id != principal.company_id:
        raise HTTPException(status_code=400, detail=f"Invalid product_id {payload.product_id}")

    item = db.get(PriceListItem, (price_list_id, payload.product_id))
    if item:
        item.price = payload.price
    else:
        db.add(PriceListItem(price_list_id=price_list_id, product_id=payload.product_id, price=payload.price))

    db.commit()
    return {"price_list_id": price_list_id, "product_id": payload.product_id, "price": payload.price}


@router.delete("/{price_list_id}/items/{product_id}")
def remove_item(
    price_list_id: int,
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    _get_price_list(db, price_list_id, principal.company_id)

    item = db.get(PriceListItem, (price_list_id, product_id))
    if not item:
        raise HTTPException(status_code=404, detail="Price not found")

    db.delete(item)
    db.commit()
    return {"price_list_id": price_list_id, "product_id": product_id}
