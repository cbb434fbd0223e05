from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_db, require_route
from showroom.app.db.models.core_types import OrderStatus
from showroom.app.db.models.models_v1 import Order
from showroom.services.navigation import Principal

router = APIRouter(prefix="/orders")

# PENDING -> PAID -> SHIPPED ; CANCELLED tant que non expédiée
ALLOWED_TRANSITIONS = {
    OrderStatus.pending: {OrderStatus.paid, OrderStatus.cancelled},
    OrderStatus.paid: {OrderStatus.shipped, OrderStatus.cancelled},
    OrderStatus.shipped: set(),
    OrderStatus.cancelled: set(),
}


class StatusUpdate(BaseModel):
    status: OrderStatus


def _order_dict(o: Order) -> dict:
    return {
        "id": o.id,
        "order_number": o.order_number,
        "status": o.status,
        "customer": o.customer.business_name if o.customer else None,
        "lead": o.lead.name if o.lead else None,
        "total": o.total,
        "created_at": o.created_at,
        "lines": [
            {
                "product_id": l.product_id,
                "variant_id": l.variant_id,
                "name": l.name,
                "size": l.size,
                "color": l.color,
                "quantity": l.quantity,
                "unit_price": l.unit_price,
                "subtotal": l.subtotal,
            }
            for l in o.lines
        ],
    }


@router.get("")
def list_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/orders")),
):
    rows = db.execute(
        select(Order)
        .where(Order.company_id == principal.company_id)
        .order_by(Order.id.desc())
    ).scalars().all()
    return [_order_dict(o) for o in rows]


@router.get("/mine")
def list_my_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/my-orders")),
):
    rows = db.execute(
        select(Order)
        .where(Order.placed_by == principal.id)
        .order_by(Order.id.desc())
    ).scalars().all()
    return [_order_dict(o) for o in rows]


@router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/orders")),
):
    order = db.get(Order, order_id)
    if not order or order.company_id != principal.company_id:
        raise HTTPException(status_code=404, detail="Order not found")

    if payload.status != order.status and payload.status not in ALLOWED_TRANSITIONS[order.status]:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move order from {order.status.value} to {payload.status.value}",
        )

    order.status = payload.status
    db.commit()
    return {"id": order.id, "status": order.status}
