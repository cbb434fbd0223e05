"""
Cart service.

Le panier est une liste ordonnée de lignes (ordre d'insertion = ordre
d'affichage = ordre du message de commande).

Règles :
    clé de fusion = (product_id, size, color)
    fusion additive : quantity += q, subtotal += s (pas de re-contrôle stock)
    total et item_count sont toujours recalculés, jamais maintenus à la main
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Iterator

from showroom.services.errors import IndexOutOfRange, InvalidSelection

logger = logging.getLogger(__name__)


@dataclass
class CartLineItem:
    product_id: int
    variant_id: int
    name: str
    unit_price: Decimal
    image_ref: str
    size: str
    color: str
    quantity: int
    subtotal: Decimal | None = None

    def __post_init__(self) -> None:
        self.unit_price = Decimal(self.unit_price)
        if self.quantity <= 0:
            raise ValueError("quantity must be > 0")
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")

        expected = self.quantity * self.unit_price
        if self.subtotal is None:
            self.subtotal = expected
        elif Decimal(self.subtotal) != expected:
            raise ValueError(f"subtotal {self.subtotal} != quantity * unit_price ({expected})")
        else:
            self.subtotal = Decimal(self.subtotal)

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.product_id, self.size, self.color)


class Cart:
    def __init__(self) -> None:
        self._lines: list[CartLineItem] = []

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(list(self._lines))

    @property
    def lines(self) -> tuple[CartLineItem, ...]:
        return tuple(self._lines)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def _find(self, key: tuple[int, str, str]) -> int:
        for idx, line in enumerate(self._lines):
            if line.key == key:
                return idx
        return -1

    def add(self, item: CartLineItem) -> tuple[CartLineItem, int]:
        idx = self._find(item.key)

        if idx == -1:
            # copy: the caller's draft must not alias the stored line
            line = replace(item)
            self._lines.append(line)
            return line, len(self._lines) - 1

        line = self._lines[idx]
        if line.variant_id != item.variant_id:
            raise InvalidSelection(
                f"Variant {item.variant_id} does not match cart line variant {line.variant_id}"
            )
        if line.unit_price != item.unit_price:
            raise InvalidSelection(
                f"Unit price changed for {item.name} ({line.unit_price} -> {item.unit_price})"
            )

        line.quantity += item.quantity
        line.subtotal += item.subtotal
        logger.debug("Merged cart line index=%s key=%s quantity=%s", idx, line.key, line.quantity)
        return line, idx

    def remove(self, index: int) -> CartLineItem:
        if index < 0 or index >= len(self._lines):
            raise IndexOutOfRange(index, len(self._lines))
        line = self._lines.pop(index)
        logger.debug("Removed cart line index=%s key=%s", index, line.key)
        return line

    def clear(self) -> None:
        self._lines.clear()


# ---------- SESSIONS ----------
@dataclass
class ShopSession:
    """What one buyer session owns: its cart and its open selection grids."""

    cart: Cart = field(default_factory=Cart)
    selections: dict = field(default_factory=dict)  # product_id -> SelectionMatrix


class SessionStore:
    """
    Process-wide registry of shop sessions.

    Only the registry itself is locked; each session has a single writer.
    Sessions idle longer than `ttl_seconds` are evicted, and past
    `max_sessions` the least recently used one goes first.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # least recently used first
        self._sessions: OrderedDict[str, tuple[ShopSession, float]] = OrderedDict()
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        while self._sessions:
            session_id, (_, last_seen) = next(iter(self._sessions.items()))
            if now - last_seen < self.ttl_seconds:
                break
            del self._sessions[session_id]
            logger.debug("Evicted idle shop session %s", session_id)

    def _touch(self, session_id: str, session: ShopSession, now: float) -> None:
        self._sessions[session_id] = (session, now)
        self._sessions.move_to_end(session_id)

    def find(self, session_id: str) -> ShopSession | None:
        """Existing session or None; never registers a new one."""
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            self._touch(session_id, entry[0], now)
            return entry[0]

    def get(self, session_id: str) -> ShopSession:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            entry = self._sessions.get(session_id)
            if entry is not None:
                session = entry[0]
            else:
                while len(self._sessions) >= self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info("Shop session limit reached, evicted %s", evicted)
                session = ShopSession()
            self._touch(session_id, session, now)
            return session

    def drop(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
