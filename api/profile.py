"""
Profile routes — user details and avatar upload.

Route prefix: /api
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile, status

from auth.dependencies import get_auth_service, get_current_user_id
from auth.schemas import UserDetailsIn, UserDetailsOut
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])


@router.post(
    "/auth/setdetails",
    response_model=UserDetailsOut,
    status_code=status.HTTP_201_CREATED,
)
async def set_details(
    details: UserDetailsIn,
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> UserDetailsOut:
    return await service.set_details(user_id, details)


@router.get("/auth/getdetails", response_model=UserDetailsOut)
async def get_details(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> UserDetailsOut:
    return await service.get_details(user_id)


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_avatar(
    avatar: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Store the uploaded avatar image for the authenticated user."""
    content = await avatar.read()
    stored = await service.upload_avatar(
        user_id,
        avatar.filename or "",
        content,
        avatar.content_type,
    )
    return {
        "message": f"File {avatar.filename} uploaded successfully",
        "filename": stored.filename,
    }
