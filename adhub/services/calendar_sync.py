"""
One-way reconciliation of games against the user's Google Calendar.

A game is unsynced while it has no stored event id and synced once one is
stored. Sync updates the stored event instead of creating a second one;
unsync and deletion remove the remote event first and only then clear the
local linkage.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.config import get_settings
from adhub.models import Game, Team, TeamLevel, User
from adhub.services.errors import (
    CalendarNotConnectedError,
    CalendarSyncError,
    GameNotSyncedError,
    NotFoundError,
    ServiceError,
)
from adhub.services.games import GameService
from adhub.services.google_calendar import CalendarApiError, CalendarClientFactory, GoogleCalendarClient
from adhub.utils.dates import format_clock, parse_clock
from adhub.utils.timestamps import local_today, utcnow

settings = get_settings()
logger = logging.getLogger(__name__)

SYNC_FAILED_MESSAGE = "Failed to sync to Google Calendar"
UNSYNC_FAILED_MESSAGE = "Failed to remove event from Google Calendar"

# Google answers these for events that are already gone
GONE_STATUS_CODES = (404, 410)

REMINDERS = {
    "useDefault": False,
    "overrides": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 60},
    ],
}


@dataclass
class SyncGameResult:
    game_id: int
    event_id: str
    html_link: str | None
    last_synced_at: datetime
    created: bool


@dataclass
class BulkSyncItem:
    game_id: int
    success: bool
    error: str | None = None


@dataclass
class CalendarCleanupReport:
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0


# ==================== Event Payload ====================

def _primary_team_name(game: Game) -> str:
    team = game.home_team
    if team is not None and team.name and team.name.strip():
        return team.name.strip()
    if team is not None and team.sport is not None and team.sport.name.strip():
        return team.sport.name.strip()
    return "TBD"


def _opponent_name(game: Game) -> str:
    if game.opponent is not None and game.opponent.name and game.opponent.name.strip():
        return game.opponent.name.strip()
    return "TBD"


def build_summary(game: Game) -> str:
    level = game.home_team.level if game.home_team is not None else None
    separator = " @ " if level == TeamLevel.VARSITY else " vs "
    return f"{_primary_team_name(game)}{separator}{_opponent_name(game)}"


def build_description(game: Game) -> str:
    team = game.home_team
    lines = [
        f"Sport: {team.sport.name if team is not None and team.sport is not None else 'TBD'}",
        f"Level: {team.level.value if team is not None else 'TBD'}",
        f"Team: {team.name if team is not None else 'TBD'}",
        f"Status: {game.status.value}",
    ]
    if game.opponent is not None:
        lines.append(f"Opponent: {game.opponent.name}")

    if game.travel_required:
        lines.append("")
        lines.append("Travel Information:")
        lines.append(f"- Travel Time: {game.estimated_travel_time or 'TBD'} minutes")
        if game.bus_count:
            lines.append(f"- Buses: {game.bus_count}")
        if game.departure_time:
            lines.append(f"- Departure: {format_clock(game.departure_time)}")
        if game.travel_cost:
            lines.append(f"- Cost: ${game.travel_cost:.2f}")

    if game.notes:
        lines.append("")
        lines.append(f"Notes: {game.notes}")

    return "\n".join(lines)


def build_location(game: Game) -> str:
    if game.is_home:
        return "Home Field"
    if game.venue is not None:
        return game.venue.full_address or "TBD"
    return "TBD"


def event_window(game: Game, duration_hours: int | None = None) -> tuple[datetime, datetime]:
    """Local start/end of the event; a game without a parseable time starts at midnight."""
    clock = parse_clock(game.time) or time(0, 0)
    start = datetime.combine(game.date, clock)
    hours = duration_hours or settings.calendar_event_duration_hours
    return start, start + timedelta(hours=hours)


def build_event(game: Game, timezone_name: str | None = None) -> dict[str, Any]:
    """Map a game (with team, sport, opponent and venue loaded) to a Calendar v3 event body."""
    timezone_name = timezone_name or settings.calendar_timezone
    start, end = event_window(game)
    return {
        "status": "confirmed",
        "summary": build_summary(game),
        "description": build_description(game),
        "location": build_location(game),
        "start": {"dateTime": start.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": timezone_name},
        "end": {"dateTime": end.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": timezone_name},
        "reminders": REMINDERS,
    }


# ==================== Sync Service ====================

class CalendarSyncService:
    def __init__(
        self,
        db: AsyncSession,
        organization_id: int,
        client_factory: CalendarClientFactory,
        pacing_seconds: float | None = None,
    ):
        self.db = db
        self.organization_id = organization_id
        self.client_factory = client_factory
        if pacing_seconds is None:
            pacing_seconds = settings.calendar_sync_delay_ms / 1000
        self.pacing_seconds = pacing_seconds
        self.games = GameService(db, organization_id)

    async def _get_user(self, user_id: int) -> User:
        user = await self.db.scalar(
            select(User).where(User.id == user_id, User.organization_id == self.organization_id)
        )
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _client_for(self, user_id: int) -> GoogleCalendarClient:
        return self.client_factory.for_user(await self._get_user(user_id))

    async def _push(self, game: Game, client: GoogleCalendarClient) -> SyncGameResult:
        event = build_event(game)
        created = game.google_calendar_event_id is None
        try:
            if created:
                data = await client.insert_event(event)
            else:
                data = await client.update_event(game.google_calendar_event_id, event)
        except CalendarApiError as e:
            logger.error("Calendar sync failed for game %s: %s", game.id, e)
            raise CalendarSyncError(SYNC_FAILED_MESSAGE) from e

        if created:
            game.google_calendar_event_id = data.get("id")
        game.google_calendar_html_link = data.get("htmlLink")
        game.calendar_synced = True
        game.last_synced_at = utcnow()
        await self.db.commit()

        logger.info(
            "%s calendar event %s for game %s",
            "Created" if created else "Updated",
            game.google_calendar_event_id,
            game.id,
        )
        return SyncGameResult(
            game_id=game.id,
            event_id=game.google_calendar_event_id,
            html_link=game.google_calendar_html_link,
            last_synced_at=game.last_synced_at,
            created=created,
        )

    async def sync_game(self, game_id: int, user_id: int) -> SyncGameResult:
        """Create the game's remote event, or update it when one is already linked."""
        game = await self.games.get_game(game_id)
        client = await self._client_for(user_id)
        return await self._push(game, client)

    async def unsync_game(self, game_id: int, user_id: int) -> None:
        """Delete the remote event and clear the local linkage."""
        game = await self.games.get_game(game_id)
        if not game.google_calendar_event_id:
            raise GameNotSyncedError()

        client = await self._client_for(user_id)
        event_id = game.google_calendar_event_id
        try:
            await client.delete_event(event_id)
        except CalendarApiError as e:
            if e.status_code not in GONE_STATUS_CODES:
                logger.error("Failed to delete calendar event %s for game %s: %s", event_id, game.id, e)
                raise CalendarSyncError(UNSYNC_FAILED_MESSAGE) from e
            logger.warning("Calendar event %s already gone (status %s)", event_id, e.status_code)

        game.google_calendar_event_id = None
        game.google_calendar_html_link = None
        game.calendar_synced = False
        await self.db.commit()
        logger.info("Unsynced game %s from calendar event %s", game.id, event_id)

    async def sync_all(self, user_id: int, limit: int | None = None) -> list[BulkSyncItem]:
        """
        Sync upcoming games that have no calendar event yet.

        Games are processed one at a time with a fixed pause between calls.
        A missing calendar connection fails the whole call up front; any
        per-game failure is recorded and the loop moves on.
        """
        client = await self._client_for(user_id)
        limit = limit or settings.calendar_bulk_sync_limit

        result = await self.db.execute(
            select(Game.id)
            .join(Team, Game.home_team_id == Team.id)
            .where(
                Team.organization_id == self.organization_id,
                Game.google_calendar_event_id.is_(None),
                Game.date >= local_today(settings.calendar_timezone),
            )
            .order_by(Game.date, Game.time, Game.id)
            .limit(limit)
        )
        game_ids = list(result.scalars().all())

        results: list[BulkSyncItem] = []
        for index, game_id in enumerate(game_ids):
            if index > 0 and self.pacing_seconds > 0:
                await asyncio.sleep(self.pacing_seconds)
            try:
                game = await self.games.get_game(game_id)
                await self._push(game, client)
                results.append(BulkSyncItem(game_id=game_id, success=True))
            except ServiceError as e:
                results.append(BulkSyncItem(game_id=game_id, success=False, error=e.message))
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error("Failed to save calendar linkage for game %s: %s", game_id, e)
                results.append(BulkSyncItem(game_id=game_id, success=False, error=SYNC_FAILED_MESSAGE))

        succeeded = sum(1 for item in results if item.success)
        logger.info(
            "Bulk calendar sync for user %s: total=%s succeeded=%s failed=%s",
            user_id,
            len(results),
            succeeded,
            len(results) - succeeded,
        )
        return results

    async def delete_remote_events(self, games: Iterable[Game], user_id: int) -> CalendarCleanupReport:
        """Best-effort removal of remote events for games about to be deleted. Never raises."""
        targets = [game for game in games if game.calendar_synced and game.google_calendar_event_id]
        report = CalendarCleanupReport(attempted=len(targets))
        if not targets:
            logger.info("Calendar cleanup for user %s: no calendar events to delete", user_id)
            return report

        try:
            client = await self._client_for(user_id)
        except (CalendarNotConnectedError, NotFoundError) as e:
            report.failed = len(targets)
            logger.error("Calendar cleanup skipped for user %s: %s", user_id, e.message)
            return report

        async def remove(game: Game) -> bool:
            try:
                await client.delete_event(game.google_calendar_event_id)
            except CalendarApiError as e:
                if e.status_code in GONE_STATUS_CODES:
                    return True
                logger.error(
                    "Calendar delete failed for game %s (event %s): %s",
                    game.id,
                    game.google_calendar_event_id,
                    e,
                )
                return False
            return True

        outcomes = await asyncio.gather(*(remove(game) for game in targets))
        report.succeeded = sum(1 for ok in outcomes if ok)
        report.failed = report.attempted - report.succeeded

        logger.info(
            "Calendar cleanup for user %s: attempted=%s succeeded=%s failed=%s",
            user_id,
            report.attempted,
            report.succeeded,
            report.failed,
        )
        return report
