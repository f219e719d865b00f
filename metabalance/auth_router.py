"""Account endpoints under /auth."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from metabalance.auth import create_access_token, get_current_user, hash_password, verify_password
from metabalance.db import get_session
from metabalance.tracking.models import LoginRequest, RegisterRequest, TokenResponse, UserOut
from metabalance.tracking.repositories import UserRepo
from metabalance.tracking.tables import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)) -> TokenResponse:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = await users.create(body.email, hash_password(body.password), body.name)
    await session.commit()
    await session.refresh(user)
    logger.info("Registered user %s", user.id)
    return TokenResponse(access_token=create_access_token(user.id), user=UserOut.model_validate(user))


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, session: AsyncSession = Depends(get_session)) -> TokenResponse:
    users = UserRepo(session)
    user = await users.get_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    await users.touch_sign_in(user)
    await session.commit()
    await session.refresh(user)
    logger.info("User %s signed in", user.id)
    return TokenResponse(access_token=create_access_token(user.id), user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(user)


@router.post("/logout")
async def logout(_: User = Depends(get_current_user)) -> dict:
    # Tokens are stateless; the client discards its copy.
    return {"success": True, "message": "Logged out successfully"}
