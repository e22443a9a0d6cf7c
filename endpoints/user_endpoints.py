from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from persistence.repositories import AsyncDygoRepository

from .dependencies import get_repo

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(repo: AsyncDygoRepository = Depends(get_repo)) -> list[dict[str, Any]]:
    return await repo.list_users()


@router.get("/{user_id}")
async def get_user(user_id: str, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    return await repo.get_user(user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: str, patch: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)
) -> dict[str, Any]:
    # Profile edits and accessList changes both land here as a shallow merge.
    return await repo.update_user(user_id, patch)
