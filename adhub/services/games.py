"""
Organization-scoped game queries and writes.

Games carry no organization column; they belong to the organization of
their home team, so every query joins through Team.
"""
import logging
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adhub.models import Game, GameStatus, Opponent, Team, Venue
from adhub.services.custom_columns import (
    CustomColumnService,
    merge_custom_data,
    validate_text_length,
)
from adhub.services.errors import (
    GameNotFoundError,
    GamesForbiddenError,
    GamesNotFoundError,
    LookupFailure,
    ValidationError,
)
from adhub.utils.dates import combine_date_clock, normalize_time_string

logger = logging.getLogger(__name__)

GAME_LOAD_OPTIONS = (
    selectinload(Game.home_team).selectinload(Team.sport),
    selectinload(Game.opponent),
    selectinload(Game.venue),
)

# Fields a client may set directly; calendar linkage is owned by sync.
WRITABLE_FIELDS = {
    "date",
    "time",
    "status",
    "is_home",
    "notes",
    "custom_data",
    "travel_required",
    "bus_travel",
    "estimated_travel_time",
    "departure_time",
    "arrival_time",
    "bus_count",
    "travel_cost",
    "home_team_id",
    "opponent_id",
    "venue_id",
}
REQUIRED_FIELDS = {"date", "status", "is_home", "travel_required", "bus_travel", "home_team_id"}


def organization_games_query(organization_id: int) -> Select:
    return (
        select(Game)
        .join(Team, Game.home_team_id == Team.id)
        .where(Team.organization_id == organization_id)
        .options(*GAME_LOAD_OPTIONS)
    )


class GameService:
    def __init__(self, db: AsyncSession, organization_id: int):
        self.db = db
        self.organization_id = organization_id

    async def list_games(
        self,
        status: GameStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Game], int]:
        query = organization_games_query(self.organization_id)
        if status is not None:
            query = query.where(Game.status == status)
        if date_from is not None:
            query = query.where(Game.date >= date_from)
        if date_to is not None:
            query = query.where(Game.date <= date_to)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(Game.date, Game.time, Game.id).offset(offset).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def list_all(self) -> list[Game]:
        """Every game of the organization ordered by date, for export."""
        result = await self.db.execute(
            organization_games_query(self.organization_id).order_by(Game.date, Game.time, Game.id)
        )
        return list(result.scalars().all())

    async def get_game(self, game_id: int) -> Game:
        result = await self.db.execute(
            organization_games_query(self.organization_id).where(Game.id == game_id)
        )
        game = result.scalar_one_or_none()
        if game is None:
            raise GameNotFoundError()
        return game

    async def _check_reference(self, model: type, entity_id: int | None, label: str) -> None:
        if entity_id is None:
            return
        found = await self.db.scalar(
            select(model.id).where(model.id == entity_id, model.organization_id == self.organization_id)
        )
        if found is None:
            raise LookupFailure(f"{label} not found")

    async def _apply(self, game: Game, changes: dict[str, Any]) -> None:
        unknown = set(changes) - WRITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown game fields: {', '.join(sorted(unknown))}")
        cleared = sorted(name for name in REQUIRED_FIELDS if name in changes and changes[name] is None)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")

        await self._check_reference(Team, changes.get("home_team_id"), "Team")
        await self._check_reference(Opponent, changes.get("opponent_id"), "Opponent")
        await self._check_reference(Venue, changes.get("venue_id"), "Venue")

        if "notes" in changes:
            validate_text_length("Notes", changes["notes"])
        if "custom_data" in changes:
            allowed = await CustomColumnService(self.db, self.organization_id).live_column_ids()
            changes["custom_data"] = merge_custom_data(game.custom_data, changes["custom_data"], allowed)
        if "time" in changes:
            changes["time"] = normalize_time_string(changes["time"])

        for field_name, value in changes.items():
            setattr(game, field_name, value)

        if game.date is None:
            raise ValidationError("Date is required")
        for field_name in ("departure_time", "arrival_time"):
            value = changes.get(field_name)
            if isinstance(value, str):
                setattr(game, field_name, combine_date_clock(game.date, value))

    async def create_game(self, data: dict[str, Any], user_id: int) -> Game:
        if data.get("home_team_id") is None:
            raise ValidationError("Team is required")

        game = Game(created_by_id=user_id, custom_data={})
        await self._apply(game, dict(data))
        self.db.add(game)
        await self.db.commit()
        logger.info("Created game id=%s organization_id=%s", game.id, self.organization_id)
        return await self.get_game(game.id)

    async def update_game(self, game_id: int, changes: dict[str, Any]) -> Game:
        game = await self.get_game(game_id)
        await self._apply(game, dict(changes))
        await self.db.commit()
        self.db.expire(game)
        return await self.get_game(game_id)

    async def delete_game(self, game: Game) -> None:
        await self.db.delete(game)
        await self.db.commit()
        logger.info("Deleted game id=%s organization_id=%s", game.id, self.organization_id)

    async def games_for_bulk_delete(self, game_ids: list[int], user_id: int) -> list[Game]:
        """
        Load games to delete in bulk.

        Every id must belong to the organization (else GamesNotFoundError) and
        must have been created by the caller (else GamesForbiddenError).
        """
        unique_ids = list(dict.fromkeys(game_ids))
        result = await self.db.execute(
            organization_games_query(self.organization_id).where(Game.id.in_(unique_ids))
        )
        games = list(result.scalars().all())

        found = {game.id for game in games}
        missing = [game_id for game_id in unique_ids if game_id not in found]
        if missing:
            raise GamesNotFoundError(missing)

        unauthorized = [game.id for game in games if game.created_by_id != user_id]
        if unauthorized:
            raise GamesForbiddenError(unauthorized)

        return games

    async def delete_games(self, games: list[Game]) -> int:
        ids = [game.id for game in games]
        if not ids:
            return 0
        result = await self.db.execute(delete(Game).where(Game.id.in_(ids)))
        await self.db.commit()
        logger.info("Bulk deleted %s game(s) organization_id=%s", result.rowcount, self.organization_id)
        return result.rowcount
