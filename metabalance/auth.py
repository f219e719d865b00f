"""Password hashing, bearer tokens and the current-user dependency."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.config import settings
from metabalance.db import get_session
from metabalance.tracking.repositories import UserRepo
from metabalance.tracking.tables import User

_ALGO = "HS256"
_PBKDF2_ALG = "sha256"
_PBKDF2_ITERATIONS = 200_000


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unb64(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac(_PBKDF2_ALG, password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"pbkdf2_{_PBKDF2_ALG}${_PBKDF2_ITERATIONS}${_b64(salt)}${_b64(dk)}"


def verify_password(password: str, password_hash: str) -> bool:
    """False for a wrong password and for any hash it cannot parse."""
    try:
        scheme, iter_s, salt_b64, dk_b64 = password_hash.split("$", 3)
        if not scheme.startswith("pbkdf2_"):
            return False
        alg = scheme.split("_", 1)[1]
        actual = hashlib.pbkdf2_hmac(alg, password.encode("utf-8"), _unb64(salt_b64), int(iter_s))
        return hmac.compare_digest(actual, _unb64(dk_b64))
    except (ValueError, binascii.Error):
        return False


def create_access_token(user_id: int, ttl_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = ttl_minutes if ttl_minutes is not None else settings.token_ttl_minutes
    payload = {"sub": str(user_id), "iat": now, "exp": now + timedelta(minutes=ttl)}
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGO)


def decode_access_token(token: str) -> int:
    """Return the user id. Raises jwt.InvalidTokenError (or ValueError) on a bad token."""
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[_ALGO])
    return int(payload["sub"])


async def get_current_user(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve ``Authorization: Bearer <token>`` to a User or raise 401."""
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user_id = decode_access_token(token)
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = await UserRepo(session).get(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User no longer exists")
    return user
