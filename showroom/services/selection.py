"""
Selection matrix service.

Un produit expose une grille couleurs x tailles. Chaque cellule pointe
sur un variant (ou rien) et porte une quantité en attente bornée par le
stock lu au moment de la sélection.

Règles :
    0 <= quantité <= stock disponible du variant
    setQuantity remplace la valeur (idempotent, jamais cumulatif)
    aucune réservation, aucun décrément de stock
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from showroom.app.schemas.product import ProductRead, VariantRead
from showroom.services.cart import CartLineItem
from showroom.services.errors import (
    InsufficientStock,
    InvalidSelection,
    NegativeQuantity,
    NoSelection,
)

logger = logging.getLogger(__name__)


class StockPolicy(Protocol):
    def available(self, variant: VariantRead) -> int: ...


class ReadTimeStock:
    """Stock as read from the catalog; a reservation scheme would plug in here."""

    def available(self, variant: VariantRead) -> int:
        return variant.stock


@dataclass(frozen=True)
class SelectionTotals:
    total_pairs: int
    total_price: Decimal


class SelectionMatrix:
    def __init__(self, product: ProductRead, stock_policy: StockPolicy | None = None):
        self.stock_policy = stock_policy or ReadTimeStock()
        self._pending: dict[tuple[str, str], int] = {}
        self._load(product)

    def _load(self, product: ProductRead) -> None:
        self.product = product

        self.sizes: list[str] = sorted({v.size for v in product.variants})
        self.colors: list[str] = sorted({v.color for v in product.variants})

        self._cells: dict[tuple[str, str], VariantRead] = {}
        for v in product.variants:
            self._cells.setdefault((v.color, v.size), v)

    @classmethod
    def build(cls, product: ProductRead, stock_policy: StockPolicy | None = None) -> "SelectionMatrix":
        return cls(product, stock_policy)

    def refresh(self, product: ProductRead) -> list[tuple[str, str]]:
        """
        Swap in a fresh read of the product (stock, price, variants).

        Pending cells whose variant is gone or whose quantity no longer fits
        the stock are dropped; their (color, size) keys are returned.
        """
        self._load(product)

        dropped = [
            key
            for key, qty in self._pending.items()
            if self.cell(*key) is None or qty > self.available(*key)
        ]
        for key in dropped:
            del self._pending[key]

        if dropped:
            logger.info("Selection refreshed product_id=%s dropped=%s", product.id, dropped)
        return dropped

    # ---------- READ ----------
    def cell(self, color: str, size: str) -> VariantRead | None:
        return self._cells.get((color, size))

    def available(self, color: str, size: str) -> int:
        variant = self.cell(color, size)
        if variant is None:
            return 0
        return max(0, self.stock_policy.available(variant))

    def is_orderable(self, color: str, size: str) -> bool:
        return self.available(color, size) > 0

    def pending(self) -> dict[tuple[str, str], int]:
        return dict(self._pending)

    def rows(self) -> list[dict]:
        """Grid for rendering: one row per color, one cell per size."""
        out = []
        for color in self.colors:
            cells = []
            for size in self.sizes:
                variant = self.cell(color, size)
                cells.append(
                    {
                        "size": size,
                        "variant_id": variant.id if variant else None,
                        "stock": self.available(color, size) if variant else None,
                        "orderable": self.is_orderable(color, size),
                        "quantity": self._pending.get((color, size), 0),
                    }
                )
            out.append({"color": color, "cells": cells})
        return out

    # ---------- WRITE ----------
    def set_quantity(self, color: str, size: str, qty: int) -> None:
        variant = self.cell(color, size)
        if variant is None:
            raise InvalidSelection(f"No variant in size {size} color {color}")

        if qty < 0:
            raise NegativeQuantity(qty)

        available = self.available(color, size)
        if qty > available:
            logger.info(
                "Rejected quantity product_id=%s color=%s size=%s qty=%s available=%s",
                self.product.id, color, size, qty, available,
            )
            raise InsufficientStock(available, size=size, color=color)

        self._pending[(color, size)] = qty

    def reset(self) -> None:
        self._pending.clear()

    # ---------- TOTALS / COMMIT ----------
    def totals(self) -> SelectionTotals:
        total_pairs = sum(self._pending.values())
        return SelectionTotals(
            total_pairs=total_pairs,
            total_price=total_pairs * self.product.price,
        )

    def commit(self) -> list[CartLineItem]:
        """
        Draft cart lines for every pending cell with a positive quantity,
        in grid order (colors, then sizes).
        """
        price = self.product.price
        items: list[CartLineItem] = []

        for color in self.colors:
            for size in self.sizes:
                qty = self._pending.get((color, size), 0)
                if qty <= 0:
                    continue
                variant = self._cells[(color, size)]
                items.append(
                    CartLineItem(
                        product_id=self.product.id,
                        variant_id=variant.id,
                        name=self.product.name,
                        unit_price=price,
                        image_ref=self.product.image_ref,
                        size=size,
                        color=color,
                        quantity=qty,
                        subtotal=qty * price,
                    )
                )

        if not items:
            raise NoSelection()
        return items
