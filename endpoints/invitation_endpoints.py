from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from persistence.repositories import AsyncDygoRepository

from .dependencies import get_repo

router = APIRouter(prefix="/api/invitations", tags=["invitations"])


@router.get("")
async def list_invitations(repo: AsyncDygoRepository = Depends(get_repo)) -> list[dict[str, Any]]:
    return await repo.list_invitations()


@router.post("")
async def create_invitation(
    invitation: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)
) -> dict[str, Any]:
    return await repo.create_invitation(invitation)


@router.put("/{invitation_id}")
async def update_invitation(
    invitation_id: str, patch: dict[str, Any], repo: AsyncDygoRepository = Depends(get_repo)
) -> dict[str, Any]:
    return await repo.update_invitation(invitation_id, patch)


@router.delete("/{invitation_id}")
async def delete_invitation(invitation_id: str, repo: AsyncDygoRepository = Depends(get_repo)) -> dict[str, bool]:
    await repo.delete_invitation(invitation_id)
    return {"success": True}
