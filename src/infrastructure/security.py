"""
Password hashing and signed-credential primitives.

* Passwords: salted PBKDF2-SHA256 via passlib (constant-time verify).
* Credentials: HS256 JWTs via python-jose with a fixed server-side expiry.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from passlib.context import CryptContext

from src.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ── Password Hashing ──────────────────────────────────────────────────


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# ── JWT ───────────────────────────────────────────────────────────────


def create_access_token(
    claims: dict[str, Any], expires_in: int | None = None
) -> tuple[str, int]:
    """Sign *claims* with a fresh expiry. Returns ``(token, expires_in)``."""
    ttl = expires_in if expires_in is not None else settings.token_expire_seconds
    payload = {
        key: value for key, value in claims.items() if key not in ("exp", "iat")
    }
    now = datetime.now(tz=timezone.utc)
    payload.update({"iat": now, "exp": now + timedelta(seconds=ttl)})
    token = jwt.encode(
        payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )
    return token, ttl


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises ``JWTError`` on failure or expiry."""
    return jwt.decode(
        token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
    )
