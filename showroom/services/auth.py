"""
Credential decoding.

Tokens are issued elsewhere; here we only decode them and turn the
result into an AuthSession. Any failure (bad signature, expired,
missing claim, unknown role) is a forced logout, never an error page.
"""

from __future__ import annotations

import logging

import jwt

from showroom.app.core.settings import JWT_ALGORITHM, JWT_SECRET
from showroom.app.db.models.core_types import Role
from showroom.services.navigation import AuthSession, Principal

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("id", "email", "role", "companyId", "exp")


class CredentialError(ValueError):
    pass


def decode_credential(
    token: str,
    *,
    secret: str = JWT_SECRET,
    algorithm: str = JWT_ALGORITHM,
) -> Principal:
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as exc:
        raise CredentialError(str(exc)) from exc

    missing = [c for c in REQUIRED_CLAIMS if c not in claims]
    if missing:
        raise CredentialError(f"Missing claims: {', '.join(missing)}")

    try:
        role = Role(claims["role"])
    except ValueError as exc:
        raise CredentialError(f"Unknown role {claims['role']!r}") from exc

    return Principal(
        id=str(claims["id"]),
        email=claims["email"],
        role=role,
        company_id=str(claims["companyId"]),
    )


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.strip():
        return None
    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def resolve_session(token: str | None, *, decoder=decode_credential) -> AuthSession:
    if not token:
        return AuthSession.anonymous()

    try:
        principal = decoder(token)
    except CredentialError as exc:
        # expired / malformed == logout
        logger.info("Credential rejected, forcing logout: %s", exc)
        return AuthSession.anonymous()

    return AuthSession.of(principal)
