"""
CSV exchange format for game schedules.

Export writes the fixed base columns followed by one column per custom
column definition. Import reads the first non-blank line as the header row
and returns one header -> value mapping per following non-blank record.
Parsing is lenient: malformed quoting never raises here, bad values surface
later as per-row validation errors.
"""
import csv
import io
import re
from typing import Any, Iterable, Iterator, Sequence

from adhub.utils.dates import format_clock, parse_clock

BASE_HEADERS: list[str] = [
    "Date",
    "Time",
    "Sport",
    "Level",
    "Team",
    "Opponent",
    "Location Type",
    "Venue",
    "Status",
    "Travel Required",
    "Bus Travel",
    "Departure Time",
    "Arrival Time",
    "Travel Time",
    "Bus Count",
    "Travel Cost",
    "Notes",
]

# Normalized header -> import row field. Covers the export headers and the
# field-style headers people type by hand ("date", "isHome", ...).
HEADER_FIELDS: dict[str, str] = {
    "date": "date",
    "gamedate": "date",
    "time": "time",
    "gametime": "time",
    "sport": "sport",
    "level": "level",
    "team": "team",
    "teamname": "team",
    "opponent": "opponent",
    "locationtype": "is_home",
    "location": "is_home",
    "homeaway": "is_home",
    "ishome": "is_home",
    "home": "is_home",
    "venue": "venue",
    "status": "status",
    "travelrequired": "travel_required",
    "bustravel": "bus_travel",
    "departuretime": "departure_time",
    "arrivaltime": "arrival_time",
    "traveltime": "estimated_travel_time",
    "estimatedtraveltime": "estimated_travel_time",
    "buscount": "bus_count",
    "travelcost": "travel_cost",
    "notes": "notes",
}

TRUE_TOKENS = {"yes", "y", "true", "t", "1"}
HOME_TOKENS = {"home", "h"} | TRUE_TOKENS

_HEADER_SUFFIX_RE = re.compile(r"\(.*?\)$")

# Oversized cells must reach the notes length check instead of failing the read
MAX_FIELD_SIZE = 16 * 1024 * 1024
csv.field_size_limit(max(csv.field_size_limit(), MAX_FIELD_SIZE))


def normalize_header(header: str) -> str:
    cleaned = _HEADER_SUFFIX_RE.sub("", header.strip().lower()).strip()
    return re.sub(r"[\s_\-]+", "", cleaned)


def parse_flag(value: Any, truthy: set[str] = TRUE_TOKENS) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in truthy


def format_flag(value: bool | None) -> str:
    return "Yes" if value else "No"


def format_number(value: int | float | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ==================== Export ====================

def _write_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


def _game_time_cell(raw: str | None) -> str:
    if not raw:
        return ""
    parsed = parse_clock(raw)
    return format_clock(parsed) if parsed else raw


def game_to_row(game: Any, custom_columns: Sequence[Any]) -> list[str]:
    """Flatten a game (with home_team.sport, opponent and venue loaded) to CSV cells."""
    team = game.home_team
    sport_name = team.sport.name if team is not None and team.sport is not None else ""
    level = team.level.value if team is not None and hasattr(team.level, "value") else (team.level if team else "")
    status = game.status.value if hasattr(game.status, "value") else (game.status or "")
    custom_data = game.custom_data or {}

    row = [
        game.date.strftime("%Y-%m-%d"),
        _game_time_cell(game.time),
        sport_name,
        level or "",
        team.name if team is not None else "",
        game.opponent.name if game.opponent is not None else "",
        "Home" if game.is_home else "Away",
        "" if game.is_home or game.venue is None else game.venue.name,
        status,
        format_flag(game.travel_required),
        format_flag(game.bus_travel),
        format_clock(game.departure_time),
        format_clock(game.arrival_time),
        format_number(game.estimated_travel_time),
        format_number(game.bus_count),
        format_number(game.travel_cost),
        game.notes or "",
    ]
    row.extend(str(custom_data.get(column.id) or "") for column in custom_columns)
    return row


def export_games_csv(games: Iterable[Any], custom_columns: Sequence[Any] = ()) -> str:
    """Serialize games to CSV text, quoting only fields that need it."""
    return _write_csv(
        BASE_HEADERS + [column.name for column in custom_columns],
        (game_to_row(game, custom_columns) for game in games),
    )


TEAM_HEADERS = ["Team Name", "Sport", "Level", "Gender"]
VENUE_HEADERS = ["Venue Name", "Address", "City", "State", "ZIP", "Notes"]
OPPONENT_HEADERS = ["Name", "Mascot", "Colors", "Contact", "Phone", "Email", "Notes"]


def export_teams_csv(teams: Iterable[Any]) -> str:
    """Teams with their sport loaded."""
    return _write_csv(
        TEAM_HEADERS,
        (
            [
                team.name,
                team.sport.name if team.sport is not None else "",
                team.level.value if hasattr(team.level, "value") else (team.level or ""),
                team.gender or "",
            ]
            for team in teams
        ),
    )


def export_venues_csv(venues: Iterable[Any]) -> str:
    return _write_csv(
        VENUE_HEADERS,
        (
            [venue.name, venue.address or "", venue.city or "", venue.state or "", venue.zip_code or "", venue.notes or ""]
            for venue in venues
        ),
    )


def export_opponents_csv(opponents: Iterable[Any]) -> str:
    return _write_csv(
        OPPONENT_HEADERS,
        (
            [
                opponent.name,
                opponent.mascot or "",
                opponent.colors or "",
                opponent.contact or "",
                opponent.phone or "",
                opponent.email or "",
                opponent.notes or "",
            ]
            for opponent in opponents
        ),
    )


# ==================== Import ====================

def _read_line(line: str) -> list[str]:
    """Leniently split one physical line; an open quote ends with the line."""
    try:
        return next(csv.reader([line.rstrip("\r\n")], strict=False), [])
    except csv.Error:
        return line.rstrip("\r\n").split(",")


def _read_records(lines: list[str]) -> Iterator[list[str]]:
    """
    Yield one record per CSV row.

    A quoted field may carry line breaks as long as its closing quote is
    found. A quote that is never closed (or a record the reader rejects)
    only affects its own physical line; reading resumes on the next one.
    """
    index = 0
    while index < len(lines):
        consumed = 0

        def feed(start: int = index) -> Iterator[str]:
            nonlocal consumed
            for position in range(start, len(lines)):
                consumed += 1
                yield lines[position]

        try:
            record = next(csv.reader(feed(), strict=True))
        except StopIteration:
            return
        except csv.Error:
            record = _read_line(lines[index])
            consumed = 1

        yield record
        index += consumed


def parse_games_csv(text: str) -> list[dict[str, str]]:
    """Split CSV text into header-keyed rows, skipping blank records. Cell values are kept verbatim."""
    if not text:
        return []

    text = text.lstrip("\ufeff").replace("\x00", "")
    lines = list(io.StringIO(text, newline=""))

    headers: list[str] | None = None
    rows: list[dict[str, str]] = []
    for record in _read_records(lines):
        if not any(cell.strip() for cell in record):
            continue
        if headers is None:
            headers = [cell.strip().strip('"') for cell in record]
            continue

        rows.append(
            {
                header: (record[index] if index < len(record) else "")
                for index, header in enumerate(headers)
                if header
            }
        )

    return rows


def csv_row_to_import_row(values: dict[str, str], custom_columns: Sequence[Any] = ()) -> dict[str, Any]:
    """Map header names to import fields; custom column headers go to custom_data."""
    custom_by_header = {normalize_header(column.name): column.id for column in custom_columns}

    data: dict[str, Any] = {}
    custom_data: dict[str, str] = {}
    for header, value in values.items():
        key = normalize_header(header)
        field_name = HEADER_FIELDS.get(key)
        if field_name is not None:
            data[field_name] = value
        elif key in custom_by_header:
            if value.strip():
                custom_data[custom_by_header[key]] = value

    for flag, truthy in (("is_home", HOME_TOKENS), ("travel_required", TRUE_TOKENS), ("bus_travel", TRUE_TOKENS)):
        if flag not in data:
            continue
        if not data[flag].strip():
            del data[flag]
        else:
            data[flag] = parse_flag(data[flag], truthy)
    if custom_data:
        data["custom_data"] = custom_data
    return data
