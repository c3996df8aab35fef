from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.api.deps import CurrentUser, get_calendar_client_factory, get_current_user, get_db
from adhub.api.errors import http_error
from adhub.models import GameStatus
from adhub.schemas.calendar import CalendarCleanupSchema
from adhub.schemas.game import (
    BulkDeleteData,
    BulkDeleteRequest,
    BulkDeleteResponse,
    GameCreate,
    GameDeleteResponse,
    GameListResponse,
    GameResponse,
    GameUpdate,
)
from adhub.services.calendar_sync import CalendarSyncService
from adhub.services.errors import ServiceError
from adhub.services.games import GameService
from adhub.services.google_calendar import CalendarClientFactory

router = APIRouter(prefix="/games", tags=["games"])


@router.get("", response_model=GameListResponse)
async def list_games(
    status_filter: GameStatus | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List the organization's games ordered by date."""
    games, total = await GameService(db, current_user.organization_id).list_games(
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return GameListResponse(items=[GameResponse.model_validate(g) for g in games], total=total)


@router.post("", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    data: GameCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        game = await GameService(db, current_user.organization_id).create_game(
            data.model_dump(), current_user.user_id
        )
    except ServiceError as e:
        raise http_error(e)
    return GameResponse.model_validate(game)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_games(
    body: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    client_factory: CalendarClientFactory = Depends(get_calendar_client_factory),
):
    """
    Delete several games created by the caller.

    Linked calendar events are removed first on a best-effort basis; their
    outcome is reported separately and never blocks the delete.
    """
    game_ids = body.game_ids or body.ids
    if not game_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No game IDs provided")

    games_service = GameService(db, current_user.organization_id)
    try:
        games = await games_service.games_for_bulk_delete(game_ids, current_user.user_id)
    except ServiceError as e:
        raise http_error(e)

    sync_service = CalendarSyncService(db, current_user.organization_id, client_factory)
    cleanup = await sync_service.delete_remote_events(games, current_user.user_id)
    deleted = await games_service.delete_games(games)

    return BulkDeleteResponse(
        data=BulkDeleteData(
            deleted_count=deleted,
            calendar=CalendarCleanupSchema.model_validate(cleanup),
        )
    )


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(
    game_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        game = await GameService(db, current_user.organization_id).get_game(game_id)
    except ServiceError as e:
        raise http_error(e)
    return GameResponse.model_validate(game)


@router.patch("/{game_id}", response_model=GameResponse)
async def update_game(
    game_id: int,
    data: GameUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Partially update a game. custom_data is merged; a null or empty value removes a key."""
    try:
        game = await GameService(db, current_user.organization_id).update_game(
            game_id, data.model_dump(exclude_unset=True)
        )
    except ServiceError as e:
        raise http_error(e)
    return GameResponse.model_validate(game)


@router.delete("/{game_id}", response_model=GameDeleteResponse)
async def delete_game(
    game_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    client_factory: CalendarClientFactory = Depends(get_calendar_client_factory),
):
    games_service = GameService(db, current_user.organization_id)
    try:
        game = await games_service.get_game(game_id)
    except ServiceError as e:
        raise http_error(e)

    sync_service = CalendarSyncService(db, current_user.organization_id, client_factory)
    cleanup = await sync_service.delete_remote_events([game], current_user.user_id)
    await games_service.delete_game(game)
    return GameDeleteResponse(calendar=CalendarCleanupSchema.model_validate(cleanup))
