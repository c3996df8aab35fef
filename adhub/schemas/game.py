from datetime import date as date_type
from datetime import datetime

from pydantic import Field

from adhub.models import GameStatus
from adhub.schemas.calendar import CalendarCleanupSchema
from adhub.schemas.common import CamelModel
from adhub.schemas.reference import OpponentResponse, TeamResponse, VenueResponse


class GameFields(CamelModel):
    time: str | None = None
    is_home: bool = True
    status: GameStatus = GameStatus.SCHEDULED
    notes: str | None = None
    custom_data: dict[str, str | None] | None = None
    travel_required: bool = False
    bus_travel: bool = False
    estimated_travel_time: int | None = Field(default=None, ge=0)
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    bus_count: int | None = Field(default=None, ge=0)
    travel_cost: float | None = Field(default=None, ge=0)
    opponent_id: int | None = None
    venue_id: int | None = None


class GameCreate(GameFields):
    date: date_type
    home_team_id: int


class GameUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    date: date_type | None = None
    time: str | None = None
    is_home: bool | None = None
    status: GameStatus | None = None
    notes: str | None = None
    custom_data: dict[str, str | None] | None = None
    travel_required: bool | None = None
    bus_travel: bool | None = None
    estimated_travel_time: int | None = Field(default=None, ge=0)
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    bus_count: int | None = Field(default=None, ge=0)
    travel_cost: float | None = Field(default=None, ge=0)
    home_team_id: int | None = None
    opponent_id: int | None = None
    venue_id: int | None = None


class GameResponse(CamelModel):
    id: int
    date: date_type
    time: str | None = None
    status: GameStatus
    is_home: bool
    notes: str | None = None
    custom_data: dict[str, str] = Field(default_factory=dict)
    travel_required: bool
    bus_travel: bool
    estimated_travel_time: int | None = None
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    bus_count: int | None = None
    travel_cost: float | None = None
    home_team: TeamResponse | None = None
    opponent: OpponentResponse | None = None
    venue: VenueResponse | None = None
    created_by_id: int | None = None
    google_calendar_event_id: str | None = None
    google_calendar_html_link: str | None = None
    calendar_synced: bool
    last_synced_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GameListResponse(CamelModel):
    items: list[GameResponse]
    total: int


class BulkDeleteRequest(CamelModel):
    game_ids: list[int] | None = None
    ids: list[int] | None = None


class BulkDeleteData(CamelModel):
    deleted_count: int
    calendar: CalendarCleanupSchema


class BulkDeleteResponse(CamelModel):
    success: bool = True
    data: BulkDeleteData


class GameDeleteResponse(CamelModel):
    success: bool = True
    calendar: CalendarCleanupSchema
