from decimal import Decimal

from pydantic import BaseModel


class OrderLinePayload(BaseModel):
    product_id: int
    variant_id: int
    name: str
    size: str
    color: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderRequest(BaseModel):
    """
    Payload for the create-lead / create-order calls.

    Amounts stay Decimal; formatted currency only ever appears in the
    human-readable message.
    """

    lead_name: str
    lead_phone: str
    company_id: str
    lines: list[OrderLinePayload]
    total: Decimal
