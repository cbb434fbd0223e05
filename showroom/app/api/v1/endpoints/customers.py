from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_db, require_route
from showroom.app.db.models.models_v1 import Customer, PriceList
from showroom.services.navigation import Principal

router = APIRouter(prefix="/customers")


class CustomerCreate(BaseModel):
    business_name: str = Field(min_length=1, max_length=255)
    tax_id: str | None = Field(default=None, max_length=32)
    code: str | None = Field(default=None, max_length=32)
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)
    price_list_id: int | None = None
    seller_id: str | None = Field(default=None, max_length=64)


@router.get("")
def list_customers(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/customers")),
):
    rows = db.execute(
        select(Customer)
        .where(Customer.company_id == principal.company_id)
        .order_by(Customer.business_name)
    ).scalars().all()
    return [
        {
            "id": c.id,
            "business_name": c.business_name,
            "tax_id": c.tax_id,
            "code": c.code,
            "credit_limit": c.credit_limit,
            "current_balance": c.current_balance,
            "price_list": {"id": c.price_list.id, "name": c.price_list.name} if c.price_list else None,
            "seller_id": c.seller_id,
        }
        for c in rows
    ]


@router.post("")
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/customers")),
):
    if payload.price_list_id is not None:
        pl = db.get(PriceList, payload.price_list_id)
        if not pl or pl.company_id != principal.company_id:
            raise HTTPException(status_code=400, detail="Invalid price_list_id")

    c = Customer(
        company_id=principal.company_id,
        business_name=payload.business_name,
        tax_id=payload.tax_id,
        code=payload.code,
        credit_limit=payload.credit_limit,
        price_list_id=payload.price_list_id,
        # a seller creating a customer owns it by default
        seller_id=payload.seller_id or principal.id,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    return {"id": c.id, "business_name": c.business_name}
