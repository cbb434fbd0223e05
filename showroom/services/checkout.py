"""
Checkout service.

Transforme le panier + le lead en :
    - une requête structurée (montants en Decimal)
    - un message lisible pour WhatsApp (montants formatés)

Le sérialiseur ne vide JAMAIS le panier : c'est l'appelant qui le fait,
une fois la commande enregistrée, pour qu'un échec laisse le panier intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.orm import Session

from showroom.app.db.models.core_types import OrderStatus
from showroom.app.db.models.models_v1 import Customer, Lead, Order, OrderLine, Product
from showroom.app.schemas.checkout import OrderLinePayload, OrderRequest
from showroom.services.cart import Cart
from showroom.services.errors import CustomerNotFound, EmptyCart, InvalidLead, MixedCompanyCart, ProductNotFound

logger = logging.getLogger(__name__)

WHATSAPP_BASE_URL = "https://wa.me"


@dataclass(frozen=True)
class LeadInfo:
    name: str
    phone: str


@dataclass(frozen=True)
class CheckoutResult:
    request: OrderRequest
    message: str


def format_currency(amount: Decimal) -> str:
    """$ + comma-grouped amount; cents only when there are any."""
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        return f"${int(amount):,}"
    return f"${amount.quantize(Decimal('0.01')):,}"


def build_message(cart: Cart, lead: LeadInfo) -> str:
    text = f"¡Hola! Soy {lead.name}.\n\n"
    text += "Me interesa levantar el siguiente pedido de su catálogo:\n\n"

    for index, line in enumerate(cart, start=1):
        text += (
            f"{index}. {line.name} | Color: {line.color} | Talla: {line.size} "
            f"| Cantidad: {line.quantity} pares | Sub: {format_currency(line.subtotal)}\n"
        )

    text += f"\nTOTAL ESTIMADO: {format_currency(cart.total)}\n\n"
    text += "Por favor, confírmeme existencia y tiempos de entrega."
    return text


def whatsapp_url(phone: str, message: str) -> str:
    return f"{WHATSAPP_BASE_URL}/{phone}?text={quote(message, safe='')}"


class CheckoutSerializer:
    def __init__(self, company_id: str):
        self.company_id = company_id

    def checkout(self, cart: Cart, lead: LeadInfo) -> CheckoutResult:
        if len(cart) == 0:
            raise EmptyCart()

        name = (lead.name or "").strip()
        phone = (lead.phone or "").strip()
        if not name:
            raise InvalidLead("Lead name is required")
        if not phone:
            raise InvalidLead("Lead phone is required")
        lead = LeadInfo(name=name, phone=phone)

        request = OrderRequest(
            lead_name=name,
            lead_phone=phone,
            company_id=self.company_id,
            lines=[
                OrderLinePayload(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    name=line.name,
                    size=line.size,
                    color=line.color,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for line in cart
            ],
            total=cart.total,
        )
        return CheckoutResult(request=request, message=build_message(cart, lead))


# ---------- ORDER / LEAD WRITES ----------
def submit_lead(db: Session, *, name: str, phone: str, company_id: str) -> Lead:
    lead = Lead(company_id=company_id, name=name, phone=phone)
    db.add(lead)
    db.flush()  # get lead.id
    return lead


def create_order(
    db: Session,
    request: OrderRequest,
    *,
    lead_id: int | None = None,
    customer_id: int | None = None,
    placed_by: str | None = None,
    notes: str | None = None,
) -> Order:
    """
    Persiste la commande (statut PENDING) et ses lignes, sans commit.
    Le total stocké est la somme des sous-totaux des lignes.
    """
    total = sum((ln.subtotal for ln in request.lines), Decimal("0"))

    order = Order(
        company_id=request.company_id,
        status=OrderStatus.pending,
        lead_id=lead_id,
        customer_id=customer_id,
        placed_by=placed_by,
        total=total,
        notes=notes,
    )
    db.add(order)
    db.flush()  # get order.id

    order.order_number = f"PED-{order.id:06d}"

    for position, ln in enumerate(request.lines):
        db.add(
            OrderLine(
                order_id=order.id,
                position=position,
                product_id=ln.product_id,
                variant_id=ln.variant_id,
                name=ln.name,
                size=ln.size,
                color=ln.color,
                quantity=ln.quantity,
                unit_price=ln.unit_price,
                subtotal=ln.subtotal,
            )
        )

    logger.info(
        "Order created order_number=%s company_id=%s lines=%s total=%s",
        order.order_number, order.company_id, len(request.lines), total,
    )
    return order


# ---------- OWNERSHIP ----------
def order_company(db: Session, cart: Cart) -> str:
    """
    Company the order belongs to: the one owning every product in the cart.
    Never taken from the client.
    """
    if len(cart) == 0:
        raise EmptyCart()

    product_ids = {line.product_id for line in cart}
    rows = db.execute(
        select(Product.id, Product.company_id).where(Product.id.in_(product_ids))
    ).all()

    missing = product_ids - {pid for pid, _ in rows}
    if missing:
        raise ProductNotFound(min(missing))

    companies = {company_id for _, company_id in rows}
    if len(companies) != 1:
        raise MixedCompanyCart(companies)
    return companies.pop()


def order_customer(db: Session, customer_id: int, company_id: str) -> Customer:
    customer = db.get(Customer, customer_id)
    if customer is None or customer.company_id != company_id:
        raise CustomerNotFound(customer_id)
    return customer
