"""
Ordering errors.

Raised by the selection, cart, checkout and navigation services; the API
layer maps each one to an HTTP status and a user-facing message.
"""

from __future__ import annotations


class OrderingError(Exception):
    pass


class ProductNotFound(OrderingError, LookupError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InvalidPriceList(OrderingError, LookupError):
    def __init__(self, price_list_id: int):
        super().__init__(f"Price list {price_list_id} not found")
        self.price_list_id = price_list_id


class CustomerNotFound(OrderingError, LookupError):
    def __init__(self, customer_id: int):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class StaffOnly(OrderingError):
    """A pricing or customer override sent by a caller who is not staff."""

    def __init__(self, field: str):
        super().__init__(f"{field} can only be set by staff")
        self.field = field


# ---------- SELECTION MATRIX ----------
class InvalidSelection(OrderingError):
    pass


class NegativeQuantity(OrderingError):
    def __init__(self, quantity: int):
        super().__init__(f"Quantity must be >= 0 (got {quantity})")
        self.quantity = quantity


class InsufficientStock(OrderingError):
    def __init__(self, available: int, *, size: str, color: str):
        super().__init__(f"Only {available} available in size {size} color {color}")
        self.available = available
        self.size = size
        self.color = color


class NoSelection(OrderingError):
    def __init__(self):
        super().__init__("Select at least one pair before adding to the order")


# ---------- CART ----------
class IndexOutOfRange(OrderingError, IndexError):
    def __init__(self, index: int, size: int):
        super().__init__(f"No cart line at position {index} (cart has {size})")
        self.index = index


# ---------- CHECKOUT ----------
class EmptyCart(OrderingError):
    def __init__(self):
        super().__init__("Cart is empty")


class InvalidLead(OrderingError):
    pass


class MixedCompanyCart(OrderingError):
    def __init__(self, company_ids):
        super().__init__(f"Cart mixes products of several companies ({', '.join(sorted(company_ids))})")
        self.company_ids = set(company_ids)


# ---------- NAVIGATION ----------
class Unauthenticated(OrderingError):
    def __init__(self, redirect_target: str):
        super().__init__("Authentication required")
        self.redirect_target = redirect_target


class Unauthorized(OrderingError):
    def __init__(self, attempted_route: str, redirect_target: str):
        super().__init__(f"Route {attempted_route} not permitted")
        self.attempted_route = attempted_route
        self.redirect_target = redirect_target
