from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from persistence.repositories import AsyncDygoRepository

from .dependencies import get_repo

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("")
async def list_goals(
    userId: Optional[str] = None, repo: AsyncDygoRepository = Depends(get_repo)
) -> list[dict[str, Any]]:
    return await repo.list_goals(userId)


@router.post("/sync")
async def sync_goals(body: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, bool]:
    """Replace every goal of body["userId"] with body["goals"]."""
    await repo.sync_goals(body.get("userId"), body.get("goals"))
    return {"success": True}
