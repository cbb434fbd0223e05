"""
Role navigation gate.

Deux tables déclaratives :
    ROUTE_ROLES : route protégée -> rôles autorisés
    MENUS       : rôle -> entrées de menu ordonnées (couches empilées)

Hiérarchie : OWNER/ADMIN ⊃ SUPERVISOR ⊃ SELLER ⊃ commun.
ADMIN est toujours traité comme OWNER.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from showroom.app.db.models.core_types import Role
from showroom.services.errors import Unauthenticated, Unauthorized

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
STOREFRONT_ROOT = "/"
ORDER_LIST = "/admin/orders"
ADMIN_ROOT = "/admin"


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: Role
    company_id: str


@dataclass(frozen=True)
class NavEntry:
    name: str
    href: str


# ---------- MENUS ----------
COMMON_NAV = (NavEntry("Dashboard", ADMIN_ROOT),)

BUYER_NAV = (
    NavEntry("Ir al Showroom", STOREFRONT_ROOT),
    NavEntry("Mis Pedidos", "/admin/my-orders"),
)

SELLER_NAV = (
    NavEntry("Ir al Showroom", STOREFRONT_ROOT),
    NavEntry("Todos los Pedidos", ORDER_LIST),
)

SUPERVISOR_NAV = SELLER_NAV + (
    NavEntry("Admin Productos", "/admin/products"),
    NavEntry("Clientes / Leads", "/admin/customers"),
    NavEntry("Listas Precio", "/admin/price-lists"),
)

OWNER_NAV = SUPERVISOR_NAV + (NavEntry("Configuración", "/admin/settings"),)

MENUS: dict[Role, tuple[NavEntry, ...]] = {
    Role.buyer: COMMON_NAV + BUYER_NAV,
    Role.seller: COMMON_NAV + SELLER_NAV,
    Role.supervisor: COMMON_NAV + SUPERVISOR_NAV,
    Role.owner: COMMON_NAV + OWNER_NAV,
}

# ---------- ROUTES ----------
_STAFF = frozenset({Role.owner, Role.supervisor, Role.seller})
_MANAGERS = frozenset({Role.owner, Role.supervisor})
_ANYONE = frozenset({Role.owner, Role.supervisor, Role.seller, Role.buyer})

ROUTE_ROLES: dict[str, frozenset[Role]] = {
    ADMIN_ROOT: _ANYONE,
    "/admin/dashboard": _STAFF,
    "/admin/orders": _STAFF,
    "/admin/customers": _STAFF,
    "/admin/products": _MANAGERS,
    "/admin/products/new": _MANAGERS,
    "/admin/price-lists": _MANAGERS,
    "/admin/settings": frozenset({Role.owner}),
    "/admin/my-orders": frozenset({Role.buyer}),
}


def _normalize(path: str) -> str:
    path = (path or "/").split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def required_roles(path: str) -> frozenset[Role] | None:
    """Roles allowed on a route; None for public routes."""
    path = _normalize(path)
    if path in ROUTE_ROLES:
        return ROUTE_ROLES[path]
    if path.startswith(ADMIN_ROOT + "/"):
        # unknown back-office pages get the back-office entry set
        return ROUTE_ROLES[ADMIN_ROOT]
    return None


def menu_for(role: Role) -> tuple[NavEntry, ...]:
    return MENUS[role.canonical]


def permitted_routes(role: Role) -> frozenset[str]:
    role = role.canonical
    return frozenset(path for path, roles in ROUTE_ROLES.items() if role in roles)


def is_staff(principal: Principal | None, company_id: str | None = None) -> bool:
    """Seller or above, optionally of a given company."""
    if principal is None or principal.role.canonical not in _STAFF:
        return False
    return company_id is None or principal.company_id == company_id


def landing_route(role: Role) -> str:
    role = role.canonical
    if role is Role.buyer:
        return STOREFRONT_ROOT
    if role is Role.seller:
        return ORDER_LIST
    return ADMIN_ROOT


# ---------- GATE ----------
class AuthState(str, enum.Enum):
    unauthenticated = "UNAUTHENTICATED"
    authenticating = "AUTHENTICATING"
    authenticated = "AUTHENTICATED"
    unauthorized = "UNAUTHORIZED"


class GateAction(str, enum.Enum):
    allow = "ALLOW"
    loading = "LOADING"
    redirect = "REDIRECT"


@dataclass(frozen=True)
class AuthSession:
    state: AuthState
    principal: Principal | None = None

    @classmethod
    def anonymous(cls) -> "AuthSession":
        return cls(AuthState.unauthenticated)

    @classmethod
    def pending(cls) -> "AuthSession":
        return cls(AuthState.authenticating)

    @classmethod
    def of(cls, principal: Principal) -> "AuthSession":
        return cls(AuthState.authenticated, principal)


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    state: AuthState
    route: str
    redirect_to: str | None = None


def gate(session: AuthSession, path: str) -> GateDecision:
    route = _normalize(path)
    roles = required_roles(route)

    if roles is None:
        return GateDecision(GateAction.allow, session.state, route)

    if session.state is AuthState.authenticating:
        # never content, never a redirect while the credential is checked
        return GateDecision(GateAction.loading, session.state, route)

    if session.state is not AuthState.authenticated or session.principal is None:
        return GateDecision(GateAction.redirect, AuthState.unauthenticated, route, LOGIN_ROUTE)

    role = session.principal.role.canonical
    if role not in roles:
        target = landing_route(role)
        logger.info("Unauthorized route=%s role=%s redirect_to=%s", route, role.value, target)
        return GateDecision(GateAction.redirect, AuthState.unauthorized, route, target)

    return GateDecision(GateAction.allow, AuthState.authenticated, route)


def enforce(session: AuthSession, path: str) -> Principal | None:
    """
    Raise on any redirect decision; return the principal when access is
    granted (None on public routes for anonymous sessions).

    Server-side sessions are resolved before this call, so a pending
    credential here is a caller bug.
    """
    decision = gate(session, path)
    if decision.action is GateAction.loading:
        raise RuntimeError("credential must be resolved before enforcing a route")
    if decision.action is GateAction.redirect:
        if decision.state is AuthState.unauthorized:
            raise Unauthorized(decision.route, decision.redirect_to)
        raise Unauthenticated(decision.redirect_to)
    return session.principal
