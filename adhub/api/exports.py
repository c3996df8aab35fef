from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adhub.api.deps import CurrentUser, get_current_user, get_db
from adhub.models import Opponent, Sport, Team, Venue
from adhub.services.csv_codec import (
    export_games_csv,
    export_opponents_csv,
    export_teams_csv,
    export_venues_csv,
)
from adhub.services.custom_columns import CustomColumnService
from adhub.services.games import GameService
from adhub.utils.timestamps import utc_today

router = APIRouter(prefix="/export", tags=["export"])


def csv_attachment(content: str, prefix: str) -> Response:
    filename = f"{prefix}-{utc_today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/games")
async def export_games(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Download every game of the organization as CSV, custom columns included."""
    games = await GameService(db, current_user.organization_id).list_all()
    columns = await CustomColumnService(db, current_user.organization_id).list_columns()
    return csv_attachment(export_games_csv(games, columns), "games")


@router.get("/teams")
async def export_teams(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Team)
        .join(Sport, Team.sport_id == Sport.id)
        .where(Team.organization_id == current_user.organization_id)
        .options(selectinload(Team.sport))
        .order_by(Sport.name, Team.level, Team.id)
    )
    return csv_attachment(export_teams_csv(result.scalars().all()), "teams")


@router.get("/venues")
async def export_venues(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Venue)
        .where(Venue.organization_id == current_user.organization_id)
        .order_by(Venue.name, Venue.id)
    )
    return csv_attachment(export_venues_csv(result.scalars().all()), "venues")


@router.get("/opponents")
async def export_opponents(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Opponent)
        .where(Opponent.organization_id == current_user.organization_id)
        .order_by(Opponent.name, Opponent.id)
    )
    return csv_attachment(export_opponents_csv(result.scalars().all()), "opponents")
