from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from persistence.repositories import AsyncDygoRepository

from .dependencies import get_repo

router = APIRouter(prefix="/api/entries", tags=["entries"])


@router.get("")
async def list_entries(
    userId: Optional[str] = None, repo: AsyncDygoRepository = Depends(get_repo)
) -> list[dict[str, Any]]:
    return await repo.list_entries(userId)


@router.post("")
async def create_entry(entry: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, Any]:
    return await repo.create_entry(entry)


@router.put("/{entry_id}")
async def update_entry(
    entry_id: str, patch: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)
) -> dict[str, Any]:
    return await repo.update_entry(entry_id, patch)


@router.delete("/{entry_id}")
async def delete_entry(entry_id: str, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, bool]:
    await repo.delete_entry(entry_id)
    return {"success": True}
