"""
Identity & Session
==================

* ``authenticate`` -- email + password against one account collection,
  returns a signed credential carrying ``{sub, role, email}``.
* ``refresh``      -- re-signs the caller's claims with a new expiry; the
  password is not re-checked.
* ``verify``       -- parses an ``Authorization: Bearer <token>`` header
  into an :class:`Identity`.
* ``register``     -- creates customer / driver / partner accounts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from jose import JWTError

from src.domain.entities import Identity
from src.domain.enums import Role
from src.domain.errors import BadRequest, Conflict, Forbidden, Unauthorized
from src.infrastructure.repositories import Store
from src.infrastructure.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

REGISTRABLE_ROLES = {Role.CUSTOMER, Role.DRIVER, Role.PARTNER}


@dataclass(frozen=True)
class Credential:
    token: str
    expires_in: int


def resolve_collection(collection: str) -> Role:
    try:
        return Role.from_collection(collection)
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc


def issue_credential(identity: Identity) -> Credential:
    token, ttl = create_access_token(
        {
            "sub": str(identity.subject_id),
            "role": identity.role.value,
            "email": identity.email,
        }
    )
    return Credential(token=token, expires_in=ttl)


def verify(authorization: Optional[str]) -> Identity:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized(
            "Missing or invalid Authorization header. Expected: Bearer <token>"
        )
    token = authorization.split(" ", 1)[1].strip()
    try:
        claims = decode_token(token)
    except JWTError as exc:
        raise Unauthorized(f"Invalid or expired token: {exc}") from exc

    try:
        return Identity(
            subject_id=int(claims["sub"]),
            role=Role(claims["role"]),
            email=claims.get("email", ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise Unauthorized("Malformed token claims") from exc


class IdentityService:
    def __init__(self, store: Store):
        self.store = store

    async def authenticate(
        self, collection: str, email: str, password: str
    ) -> Credential:
        role = resolve_collection(collection)
        account = await self.store.accounts(role).get_by_email(email)
        if account is None or not verify_password(password, account.password_hash):
            logger.info("Failed login for %s in %s", email, collection)
            raise Unauthorized("Invalid email or password")

        logger.info("Login: %s #%d", role.value, account.id)
        return issue_credential(
            Identity(subject_id=account.id, role=role, email=account.email)
        )

    @staticmethod
    def refresh(identity: Identity) -> Credential:
        return issue_credential(identity)

    async def register(self, collection: str, fields: dict[str, Any]):
        role = resolve_collection(collection)
        if role not in REGISTRABLE_ROLES:
            raise Forbidden(f"Accounts in '{collection}' cannot self-register")

        repo = self.store.accounts(role)
        email = fields.pop("email")
        if await repo.get_by_email(email) is not None:
            raise Conflict("Email already registered")

        password = fields.pop("password")
        account = await repo.insert(
            email=email, password_hash=hash_password(password), **fields
        )
        logger.info("Registered %s #%d", role.value, account.id)
        return account
