"""
Public user profile lookup.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.db.session import get_db
from eventfinder.schemas.common import ApiResponse
from eventfinder.schemas.user import PublicUserResponse
from eventfinder.services import auth_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}", response_model=ApiResponse[PublicUserResponse])
async def get_public_user(user_id: int, db: AsyncSession = Depends(get_db)):
    """Public profile: no email, phone or account flags."""
    user = await auth_service.get_user(db, user_id)
    return ApiResponse(
        message="User fetched successfully",
        status=status.HTTP_200_OK,
        data=PublicUserResponse.model_validate(user),
    )
