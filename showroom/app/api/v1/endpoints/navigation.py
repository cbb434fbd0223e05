from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from showroom.app.api.deps import get_auth_session
from showroom.services.navigation import AuthSession, LOGIN_ROUTE, gate, menu_for

router = APIRouter(prefix="/navigation")


@router.get("/menu")
def get_menu(auth: AuthSession = Depends(get_auth_session)):
    if auth.principal is None:
        raise HTTPException(
            status_code=401,
            detail={"message": "Authentication required", "redirect_to": LOGIN_ROUTE},
            headers={"Location": LOGIN_ROUTE},
        )

    role = auth.principal.role
    return {
        "role": role.value,
        "items": [{"name": e.name, "href": e.href} for e in menu_for(role)],
    }


@router.get("/resolve")
def resolve_route(path: str, auth: AuthSession = Depends(get_auth_session)):
    """
    Décision du gate pour une route (ALLOW / REDIRECT), sans lever :
    le client applique la redirection lui-même.
    """
    decision = gate(auth, path)
    return {
        "route": decision.route,
        "action": decision.action.value,
        "state": decision.state.value,
        "redirect_to": decision.redirect_to,
    }
