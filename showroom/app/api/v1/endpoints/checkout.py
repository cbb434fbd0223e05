from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from showroom.app.api.deps import (
    get_auth_session,
    get_cart_session_id,
    get_db,
    get_session_store,
    peek_shop_session,
)
from showroom.app.core.settings import VENDOR_PHONE
from showroom.services.cart import SessionStore, ShopSession
from showroom.services.checkout import (
    CheckoutSerializer,
    LeadInfo,
    create_order,
    order_company,
    order_customer,
    submit_lead,
    whatsapp_url,
)
from showroom.services.errors import (
    CustomerNotFound,
    EmptyCart,
    InvalidLead,
    MixedCompanyCart,
    ProductNotFound,
)
from showroom.services.navigation import AuthSession, is_staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout")


class CheckoutCreate(BaseModel):
    name: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=32)
    customer_id: int | None = None  # staff only
    notes: str | None = None


@router.post("")
def checkout(
    payload: CheckoutCreate,
    db: Session = Depends(get_db),
    shop: ShopSession = Depends(peek_shop_session),
    session_id: str = Depends(get_cart_session_id),
    store: SessionStore = Depends(get_session_store),
    auth: AuthSession = Depends(get_auth_session),
):
    principal = auth.principal

    try:
        company_id = order_company(db, shop.cart)
        result = CheckoutSerializer(company_id).checkout(
            shop.cart, LeadInfo(name=payload.name, phone=payload.phone)
        )
    except EmptyCart as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except MixedCompanyCart as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ProductNotFound as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except InvalidLead as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if payload.customer_id is not None:
        if not is_staff(principal, company_id):
            raise HTTPException(status_code=403, detail="customer_id can only be set by staff")
        try:
            order_customer(db, payload.customer_id, company_id)
        except CustomerNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))

    try:
        lead = submit_lead(
            db,
            name=result.request.lead_name,
            phone=result.request.lead_phone,
            company_id=company_id,
        )
        order = create_order(
            db,
            result.request,
            lead_id=lead.id,
            customer_id=payload.customer_id,
            placed_by=principal.id if principal else None,
            notes=payload.notes,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Checkout failed company_id=%s lines=%s", company_id, len(shop.cart))
        raise HTTPException(
            status_code=503,
            detail="No se pudo procesar tu pedido, intenta de nuevo.",
        )

    # only once the order is stored
    shop.cart.clear()
    store.drop(session_id)

    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "message": result.message,
        "whatsapp_url": whatsapp_url(VENDOR_PHONE, result.message),
        "request": result.request,
    }
