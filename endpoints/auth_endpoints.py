from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from mailer import MailDeliveryError, Mailer, build_reset_message
from persistence.errors import InvalidRequest
from persistence.repositories import AsyncDygoRepository
from settings import get_settings

from .dependencies import get_mailer, get_repo

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    newPassword: Optional[str] = None


@router.post("/register")
async def register(body: RegisterRequest, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    logger.info("REGISTER requested")
    return await repo.register_user(
        name=(body.name or "").strip(),
        email=(body.email or "").strip(),
        password=body.password or "",
        role=body.role,
    )


@router.post("/login")
async def login(body: LoginRequest, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    user = await repo.authenticate(email=(body.email or "").strip(), password=body.password or "")
    logger.info("LOGIN ok: user=%s", user.get("id"))
    return user


def _reset_url(base_url: str, token: str) -> str:
    return f"{base_url}/reset-password?{urlencode({'token': token})}"


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest,
    repo: AsyncDygoRepository = Depends(get_repo),
    mailer: Mailer = Depends(get_mailer),
) -> dict[str, Any]:
    settings = get_settings()
    email = (body.email or "").strip()
    if not email:
        raise InvalidRequest("email is required")

    if not mailer.is_configured and not settings.returns_reset_links:
        logger.error("RESET: mail transport not configured (APP_ENV=%s)", settings.environment or "unset")
        raise HTTPException(status_code=503, detail="Password reset is temporarily unavailable")

    token = await repo.request_password_reset(email, ttl=settings.reset_token_ttl_seconds)
    # Same reply for unknown emails, so accounts cannot be enumerated.
    if token is None:
        return {"success": True}

    reset_url = _reset_url(settings.public_app_url, token)
    if mailer.is_configured:
        try:
            await asyncio.to_thread(mailer.send, build_reset_message(email, reset_url))
        except MailDeliveryError:
            raise HTTPException(status_code=502, detail="Failed to send reset email")
        return {"success": True}

    # Development only: no transport, hand the link back directly.
    logger.warning("RESET: mail not configured; returning reset link in response (env=%s)", settings.environment)
    return {"success": True, "resetUrl": reset_url}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    await repo.reset_password(body.token or "", body.newPassword or "")
    return {"success": True}
