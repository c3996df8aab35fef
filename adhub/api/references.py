from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adhub.api.deps import CurrentUser, get_current_user, get_db
from adhub.models import Opponent, Sport, Team, Venue
from adhub.schemas.reference import OpponentResponse, SportResponse, TeamResponse, VenueResponse

router = APIRouter(tags=["reference"])


@router.get("/sports", response_model=list[SportResponse])
async def list_sports(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(select(Sport).order_by(Sport.name))
    return [SportResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/teams", response_model=list[TeamResponse])
async def list_teams(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Team)
        .where(Team.organization_id == current_user.organization_id)
        .options(selectinload(Team.sport))
        .order_by(Team.name)
    )
    return [TeamResponse.model_validate(t) for t in result.scalars().all()]


@router.get("/opponents", response_model=list[OpponentResponse])
async def list_opponents(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Opponent)
        .where(Opponent.organization_id == current_user.organization_id)
        .order_by(Opponent.name)
    )
    return [OpponentResponse.model_validate(o) for o in result.scalars().all()]


@router.get("/venues", response_model=list[VenueResponse])
async def list_venues(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await db.execute(
        select(Venue)
        .where(Venue.organization_id == current_user.organization_id)
        .order_by(Venue.name)
    )
    return [VenueResponse.model_validate(v) for v in result.scalars().all()]
