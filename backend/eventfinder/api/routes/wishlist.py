"""
Wishlist endpoints. All scoped to the authenticated caller.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.api.deps import require_user
from eventfinder.core.security import Identity
from eventfinder.db.session import get_db
from eventfinder.schemas.common import ApiResponse
from eventfinder.schemas.event import EventResponse
from eventfinder.schemas.wishlist import WishlistAdd, WishlistEntryResponse
from eventfinder.services import wishlist_service

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


@router.get("", response_model=ApiResponse[list[WishlistEntryResponse]])
async def get_wishlist_endpoint(
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await wishlist_service.get_wishlist(db, identity.user_id)
    data = [
        WishlistEntryResponse(
            id=entry.id,
            user_id=entry.user_id,
            event_id=entry.event_id,
            created_at=entry.created_at,
            event=EventResponse.model_validate(event),
        )
        for entry, event in rows
    ]
    return ApiResponse(message="Wishlist fetched successfully", status=status.HTTP_200_OK, data=data)


@router.post("", response_model=ApiResponse[WishlistEntryResponse], status_code=status.HTTP_201_CREATED)
async def add_to_wishlist_endpoint(
    body: WishlistAdd,
    response: Response,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Adding an event that is already saved returns the existing entry with 200."""
    entry, created = await wishlist_service.add_to_wishlist(db, identity.user_id, body.event_id)
    code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    response.status_code = code
    return ApiResponse(
        message="Added to wishlist" if created else "Event already in wishlist",
        status=code,
        data=WishlistEntryResponse.model_validate(entry),
    )


@router.delete("/{ref}", response_model=ApiResponse[None])
async def remove_from_wishlist_endpoint(
    ref: int,
    identity: Identity = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """`ref` is either the wishlist entry id or the event id."""
    await wishlist_service.remove_from_wishlist(db, identity.user_id, ref)
    return ApiResponse(message="Removed from wishlist", status=status.HTTP_200_OK)
