from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.api.deps import CurrentUser, get_calendar_client_factory, get_current_user, get_db
from adhub.api.errors import http_error
from adhub.schemas.calendar import (
    BulkSyncData,
    BulkSyncItemSchema,
    BulkSyncResponse,
    SyncGameData,
    SyncGameResponse,
)
from adhub.schemas.common import MessageResponse
from adhub.services.calendar_sync import CalendarSyncService
from adhub.services.errors import ServiceError
from adhub.services.google_calendar import CalendarClientFactory

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _service(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    client_factory: CalendarClientFactory = Depends(get_calendar_client_factory),
) -> CalendarSyncService:
    return CalendarSyncService(db, current_user.organization_id, client_factory)


@router.post("/sync/{game_id}", response_model=SyncGameResponse)
async def sync_game(
    game_id: int,
    service: CalendarSyncService = Depends(_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create or update the game's Google Calendar event."""
    try:
        result = await service.sync_game(game_id, current_user.user_id)
    except ServiceError as e:
        raise http_error(e)
    return SyncGameResponse(data=SyncGameData.model_validate(result))


@router.delete("/sync/{game_id}", response_model=MessageResponse)
async def unsync_game(
    game_id: int,
    service: CalendarSyncService = Depends(_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Remove the game's event from Google Calendar."""
    try:
        await service.unsync_game(game_id, current_user.user_id)
    except ServiceError as e:
        raise http_error(e)
    return MessageResponse(message="Game removed from calendar")


@router.post("/sync-all", response_model=BulkSyncResponse)
async def sync_all_games(
    service: CalendarSyncService = Depends(_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Sync upcoming unsynced games one by one; per-game failures are reported."""
    try:
        results = await service.sync_all(current_user.user_id)
    except ServiceError as e:
        raise http_error(e)

    succeeded = sum(1 for item in results if item.success)
    return BulkSyncResponse(
        data=BulkSyncData(
            results=[BulkSyncItemSchema.model_validate(item) for item in results],
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )
    )
