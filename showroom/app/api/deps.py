from __future__ import annotations

from typing import Callable, Generator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from showroom.app.db.session import SessionLocal
from showroom.services.auth import bearer_token, resolve_session
from showroom.services.cart import SessionStore, ShopSession
from showroom.services.errors import Unauthenticated, Unauthorized
from showroom.services.navigation import AuthSession, Principal, enforce


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_cart_session_id(
    cart_session: str | None = Header(default=None, alias="X-Cart-Session"),
) -> str:
    if not cart_session or not cart_session.strip():
        raise HTTPException(status_code=400, detail="Missing X-Cart-Session header")
    return cart_session.strip()


def get_shop_session(
    store: SessionStore = Depends(get_session_store),
    session_id: str = Depends(get_cart_session_id),
) -> ShopSession:
    return store.get(session_id)


def peek_shop_session(
    store: SessionStore = Depends(get_session_store),
    session_id: str = Depends(get_cart_session_id),
) -> ShopSession:
    """Read access: an unknown id gets an empty session that is not registered."""
    return store.find(session_id) or ShopSession()


def get_auth_session(authorization: str | None = Header(default=None)) -> AuthSession:
    return resolve_session(bearer_token(authorization))


def require_route(path: str) -> Callable[..., Principal]:
    """
    Gate dependency for a protected back-office route.

    401 + Location: /login when there is no valid credential,
    403 + Location: <role landing route> when the role is not allowed.
    """

    def _gate(session: AuthSession = Depends(get_auth_session)) -> Principal:
        try:
            return enforce(session, path)
        except Unauthenticated as exc:
            raise HTTPException(
                status_code=401,
                detail={"message": str(exc), "redirect_to": exc.redirect_target},
                headers={"Location": exc.redirect_target},
            )
        except Unauthorized as exc:
            raise HTTPException(
                status_code=403,
                detail={"message": str(exc), "redirect_to": exc.redirect_target},
                headers={"Location": exc.redirect_target},
            )

    return _gate
