"""
Reference lookups used by import and sync.

Maps loosely-typed strings (sport name, level, status, opponent, venue) to
persisted entities, creating minimal rows when no case-insensitive match
exists inside the organization. Enum-like strings are normalized or
defaulted, never rejected.
"""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.models import GameStatus, Opponent, Sport, SportSeason, Team, TeamLevel, Venue

logger = logging.getLogger(__name__)


# ==================== Enum Normalization ====================

LEVEL_ALIASES: dict[str, TeamLevel] = {
    "VARSITY": TeamLevel.VARSITY,
    "V": TeamLevel.VARSITY,
    "VAR": TeamLevel.VARSITY,
    "JV": TeamLevel.JV,
    "JUNIOR VARSITY": TeamLevel.JV,
    "FRESHMAN": TeamLevel.FRESHMAN,
    "FROSH": TeamLevel.FRESHMAN,
    "F": TeamLevel.FRESHMAN,
    "MIDDLE SCHOOL": TeamLevel.MIDDLE_SCHOOL,
    "MIDDLE_SCHOOL": TeamLevel.MIDDLE_SCHOOL,
    "MS": TeamLevel.MIDDLE_SCHOOL,
    "MIDDLE": TeamLevel.MIDDLE_SCHOOL,
    "YOUTH": TeamLevel.YOUTH,
    "Y": TeamLevel.YOUTH,
}

STATUS_ALIASES: dict[str, GameStatus] = {
    "SCHEDULED": GameStatus.SCHEDULED,
    "CONFIRMED": GameStatus.CONFIRMED,
    "POSTPONED": GameStatus.POSTPONED,
    "CANCELLED": GameStatus.CANCELLED,
    "CANCELED": GameStatus.CANCELLED,
    "COMPLETED": GameStatus.COMPLETED,
    "COMPLETE": GameStatus.COMPLETED,
    "FINISHED": GameStatus.COMPLETED,
}

DEFAULT_LEVEL = TeamLevel.VARSITY
DEFAULT_STATUS = GameStatus.SCHEDULED
DEFAULT_SPORT_SEASON = SportSeason.FALL


def normalize_level(value: Any) -> TeamLevel:
    """Map a level string to TeamLevel, defaulting to VARSITY."""
    if isinstance(value, TeamLevel):
        return value
    if value is None:
        return DEFAULT_LEVEL
    return LEVEL_ALIASES.get(str(value).strip().upper(), DEFAULT_LEVEL)


def normalize_status(value: Any) -> GameStatus:
    """Map a status string to GameStatus, defaulting to SCHEDULED."""
    if isinstance(value, GameStatus):
        return value
    if value is None:
        return DEFAULT_STATUS
    return STATUS_ALIASES.get(str(value).strip().upper(), DEFAULT_STATUS)


def _clean(value: str | None) -> str:
    return (value or "").strip()


# ==================== Reference Resolver ====================

class ReferenceResolver:
    """
    Find-or-create helper scoped to one organization.

    Resolved ids are cached per instance, so a single import run hits the
    database once per distinct name.
    """

    def __init__(self, db: AsyncSession, organization_id: int):
        self.db = db
        self.organization_id = organization_id
        self._sport_cache: dict[str, Sport] = {}
        self._team_cache: dict[tuple[int, TeamLevel, str], Team] = {}
        self._opponent_cache: dict[str, int] = {}
        self._venue_cache: dict[str, int] = {}

    async def get_or_create_sport(self, name: str | None) -> Sport | None:
        """Get sport by case-insensitive name or create it with the default season."""
        name = _clean(name)
        if not name:
            return None

        key = name.lower()
        if key in self._sport_cache:
            return self._sport_cache[key]

        result = await self.db.execute(
            select(Sport).where(func.lower(Sport.name) == key).order_by(Sport.id).limit(1)
        )
        sport = result.scalar_one_or_none()

        if sport is None:
            sport = Sport(name=name, season=DEFAULT_SPORT_SEASON)
            self.db.add(sport)
            await self.db.flush()
            logger.info("Created sport id=%s name=%s", sport.id, name)

        self._sport_cache[key] = sport
        return sport

    async def get_or_create_team(
        self,
        sport: Sport,
        level: TeamLevel,
        team_name: str | None = None,
    ) -> Team:
        """
        Get the organization's team for sport + level or create it.

        When a team name is supplied, a case-insensitive name match among the
        sport + level teams wins; otherwise the first such team is used.
        """
        team_name = _clean(team_name)
        key = (sport.id, level, team_name.lower())
        if key in self._team_cache:
            return self._team_cache[key]

        result = await self.db.execute(
            select(Team)
            .where(
                Team.organization_id == self.organization_id,
                Team.sport_id == sport.id,
                Team.level == level,
            )
            .order_by(Team.id)
        )
        candidates = result.scalars().all()

        team = None
        if team_name:
            team = next(
                (t for t in candidates if t.name.strip().lower() == team_name.lower()),
                None,
            )
        if team is None and candidates:
            team = candidates[0]

        if team is None:
            team = Team(
                name=team_name or f"{sport.name} {level.value}",
                sport_id=sport.id,
                level=level,
                organization_id=self.organization_id,
            )
            self.db.add(team)
            await self.db.flush()
            logger.info(
                "Created team id=%s name=%s organization_id=%s",
                team.id,
                team.name,
                self.organization_id,
            )

        self._team_cache[key] = team
        return team

    async def get_or_create_opponent(self, name: str | None) -> int | None:
        """Get opponent id by case-insensitive name or create a new opponent."""
        name = _clean(name)
        if not name:
            return None

        key = name.lower()
        if key in self._opponent_cache:
            return self._opponent_cache[key]

        result = await self.db.execute(
            select(Opponent.id)
            .where(
                Opponent.organization_id == self.organization_id,
                func.lower(Opponent.name) == key,
            )
            .order_by(Opponent.id)
            .limit(1)
        )
        opponent_id = result.scalar_one_or_none()

        if opponent_id is None:
            opponent = Opponent(name=name, organization_id=self.organization_id)
            self.db.add(opponent)
            await self.db.flush()
            opponent_id = opponent.id

        self._opponent_cache[key] = opponent_id
        return opponent_id

    async def get_or_create_venue(self, name: str | None) -> int | None:
        """Get venue id by case-insensitive name or create a new venue."""
        name = _clean(name)
        if not name:
            return None

        key = name.lower()
        if key in self._venue_cache:
            return self._venue_cache[key]

        result = await self.db.execute(
            select(Venue.id)
            .where(
                Venue.organization_id == self.organization_id,
                func.lower(Venue.name) == key,
            )
            .order_by(Venue.id)
            .limit(1)
        )
        venue_id = result.scalar_one_or_none()

        if venue_id is None:
            venue = Venue(name=name, organization_id=self.organization_id)
            self.db.add(venue)
            await self.db.flush()
            venue_id = venue.id

        self._venue_cache[key] = venue_id
        return venue_id

    def invalidate_caches(self) -> None:
        """Drop cached lookups, e.g. after a rolled-back savepoint."""
        self._sport_cache.clear()
        self._team_cache.clear()
        self._opponent_cache.clear()
        self._venue_cache.clear()
