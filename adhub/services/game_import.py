"""
Bulk game import with per-row independence.

Each row is resolved and inserted inside its own SAVEPOINT and committed on
its own, so a bad row only rolls back itself. The caller always gets a report
of how many rows made it in and a "Row N: ..." message for every row that
did not.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.models import Game
from adhub.services.csv_codec import HOME_TOKENS, csv_row_to_import_row, parse_flag, parse_games_csv
from adhub.services.custom_columns import CustomColumnService, validate_custom_data, validate_text_length
from adhub.services.errors import LookupFailure, ServiceError, ValidationError
from adhub.services.lookup import ReferenceResolver, normalize_level, normalize_status
from adhub.utils.dates import combine_date_clock, normalize_time_string, parse_date

logger = logging.getLogger(__name__)

MISSING_REQUIRED_MESSAGE = "Missing required fields (date, sport, or level)"
INVALID_DATE_MESSAGE = "Invalid date format"

# camelCase / alternative keys accepted in JSON batch rows
ROW_KEY_ALIASES = {
    "team_name": "team",
    "home": "is_home",
    "travel_time": "estimated_travel_time",
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class ImportReport:
    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)

    def add_failure(self, row_number: int, message: str) -> None:
        self.failed_count += 1
        self.errors.append(f"Row {row_number}: {message}")


def normalize_row_keys(row: dict[str, Any]) -> dict[str, Any]:
    """Accept snake_case and camelCase keys in one row shape."""
    normalized: dict[str, Any] = {}
    for key, value in row.items():
        snake = _CAMEL_RE.sub("_", str(key)).lower()
        normalized[ROW_KEY_ALIASES.get(snake, snake)] = value
    return normalized


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _free_text(value: Any) -> str | None:
    """Free text keeps its surrounding whitespace; blank means absent."""
    if value is None or not str(value).strip():
        return None
    return str(value)


def parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip().replace(",", "")))
    except ValueError:
        return None


def parse_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace("$", "").replace(",", ""))
    except ValueError:
        return None


def parse_travel_clock(game_date, value: Any) -> datetime | None:
    """Departure/arrival are clock strings on the game date, or ISO datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    combined = combine_date_clock(game_date, value)
    if combined is not None:
        return combined
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None


class GameImportService:
    """Imports game rows for one organization on behalf of one user."""

    def __init__(self, db: AsyncSession, organization_id: int, user_id: int):
        self.db = db
        self.organization_id = organization_id
        self.user_id = user_id
        self.resolver = ReferenceResolver(db, organization_id)
        self._column_ids: set[str] | None = None

    async def _live_column_ids(self) -> set[str]:
        if self._column_ids is None:
            self._column_ids = await CustomColumnService(self.db, self.organization_id).live_column_ids()
        return self._column_ids

    async def import_csv(self, text: str) -> ImportReport:
        """Parse CSV text and import each data row."""
        columns = await CustomColumnService(self.db, self.organization_id).list_columns()
        rows = [csv_row_to_import_row(row, columns) for row in parse_games_csv(text)]
        return await self.import_rows(rows)

    async def import_rows(self, rows: Iterable[Any]) -> ImportReport:
        """Import rows independently; ``success_count + failed_count == len(rows)``."""
        report = ImportReport()

        for number, row in enumerate(rows, start=1):
            try:
                async with self.db.begin_nested():
                    await self._import_row(row)
                await self.db.commit()
                report.success_count += 1
            except ServiceError as e:
                self.resolver.invalidate_caches()
                report.add_failure(number, e.message)
                logger.warning("Import row %s rejected: %s", number, e.message)
            except SQLAlchemyError as e:
                self.resolver.invalidate_caches()
                report.add_failure(number, "Failed to save game")
                logger.warning("Import row %s failed to save: %s", number, e)

        logger.info(
            "Imported games for organization_id=%s: success=%s failed=%s",
            self.organization_id,
            report.success_count,
            report.failed_count,
        )
        return report

    async def _import_row(self, raw: Any) -> Game:
        if not isinstance(raw, dict):
            raise ValidationError("Invalid row data")
        row = normalize_row_keys(raw)

        date_raw = row.get("date")
        sport_name = _text(row.get("sport"))
        level_raw = _text(row.get("level"))
        if not _text(date_raw) or not sport_name or not level_raw:
            raise ValidationError(MISSING_REQUIRED_MESSAGE)

        level = normalize_level(level_raw)
        status = normalize_status(_text(row.get("status")) or None)

        is_home_raw = row.get("is_home")
        is_home = True if is_home_raw is None or is_home_raw == "" else parse_flag(is_home_raw, HOME_TOKENS)

        sport = await self.resolver.get_or_create_sport(sport_name)
        if sport is None:
            raise LookupFailure(f"Sport '{sport_name}' could not be resolved")
        team = await self.resolver.get_or_create_team(sport, level, _text(row.get("team")) or None)
        opponent_id = await self.resolver.get_or_create_opponent(_text(row.get("opponent")))
        venue_id = None
        if not is_home:
            venue_id = await self.resolver.get_or_create_venue(_text(row.get("venue")))

        game_date = parse_date(date_raw)
        if game_date is None:
            raise ValidationError(INVALID_DATE_MESSAGE)

        notes = _free_text(row.get("notes"))
        validate_text_length("Notes", notes)
        custom_data = validate_custom_data(row.get("custom_data"), await self._live_column_ids())

        game = Game(
            date=game_date,
            time=normalize_time_string(_text(row.get("time")) or None),
            home_team_id=team.id,
            opponent_id=opponent_id,
            venue_id=venue_id,
            is_home=is_home,
            status=status,
            notes=notes,
            custom_data=custom_data,
            travel_required=parse_flag(row.get("travel_required")),
            bus_travel=parse_flag(row.get("bus_travel")),
            estimated_travel_time=parse_int(row.get("estimated_travel_time")),
            departure_time=parse_travel_clock(game_date, row.get("departure_time")),
            arrival_time=parse_travel_clock(game_date, row.get("arrival_time")),
            bus_count=parse_int(row.get("bus_count")),
            travel_cost=parse_float(row.get("travel_cost")),
            created_by_id=self.user_id,
        )
        self.db.add(game)
        await self.db.flush()
        return game
