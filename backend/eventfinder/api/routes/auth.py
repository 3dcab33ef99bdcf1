"""
Authentication endpoints: register, login and the caller's own profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.api.deps import require_user
from eventfinder.core.logging import get_logger
from eventfinder.core.security import Identity
from eventfinder.db.session import get_db
from eventfinder.schemas.common import ApiResponse
from eventfinder.schemas.user import AuthPayload, ProfileUpdate, UserCreate, UserLogin, UserResponse
from eventfinder.services import auth_service

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a user or organizer account and sign it in."""
    user, token = await auth_service.register_user(db, user_data)
    return ApiResponse(
        message="Registration successful",
        status=status.HTTP_201_CREATED,
        data=AuthPayload(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/login", response_model=ApiResponse[AuthPayload])
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user, token = await auth_service.authenticate_user(db, login_data)
    return ApiResponse(
        message="Login successful",
        status=status.HTTP_200_OK,
        data=AuthPayload(user=UserResponse.model_validate(user), token=token),
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    user = await auth_service.get_user(db, identity.user_id)
    return ApiResponse(message="Profile fetched", status=status.HTTP_200_OK, data=UserResponse.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    profile: ProfileUpdate,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    user = await auth_service.update_profile(db, identity.user_id, profile)
    return ApiResponse(message="Profile updated", status=status.HTTP_200_OK, data=UserResponse.model_validate(user))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(identity: Identity = Depends(require_user)):
    # Tokens are stateless; the client drops its copy
    logger.info("user_logged_out", user_id=identity.user_id)
    return ApiResponse(message="Logged out", status=status.HTTP_200_OK)
