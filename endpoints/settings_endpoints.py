from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from persistence.repositories import AsyncDygoRepository

from .dependencies import get_repo

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/{user_id}")
async def get_user_settings(user_id: str, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    return await repo.get_settings(user_id)


@router.post("/{user_id}")
async def put_user_settings(
    user_id: str, value: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)
) -> dict[str, bool]:
    await repo.put_settings(user_id, value)
    return {"success": True}
