import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.api.deps import CurrentUser, get_current_user, get_db
from adhub.models import User
from adhub.schemas.calendar import CalendarStatusResponse
from adhub.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


async def _load_user(db: AsyncSession, current_user: CurrentUser) -> User:
    user = await db.scalar(
        select(User).where(
            User.id == current_user.user_id,
            User.organization_id == current_user.organization_id,
        )
    )
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/calendar-status", response_model=CalendarStatusResponse)
async def calendar_status(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    user = await _load_user(db, current_user)
    return CalendarStatusResponse(connected=user.calendar_connected)


@router.post("/calendar-disconnect", response_model=MessageResponse)
async def calendar_disconnect(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Forget the stored Google Calendar credentials. Synced events stay in Google."""
    user = await _load_user(db, current_user)
    user.google_calendar_refresh_token = None
    user.google_calendar_access_token = None
    user.calendar_token_expiry = None
    await db.commit()
    logger.info("Disconnected Google Calendar for user %s", user.id)
    return MessageResponse(message="Google Calendar disconnected")
