from adhub.models import SportSeason, TeamLevel
from adhub.schemas.common import CamelModel


class SportResponse(CamelModel):
    id: int
    name: str
    season: SportSeason


class TeamResponse(CamelModel):
    id: int
    name: str
    level: TeamLevel
    gender: str | None = None
    sport: SportResponse | None = None


class OpponentResponse(CamelModel):
    id: int
    name: str
    mascot: str | None = None
    colors: str | None = None
    contact: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None


class VenueResponse(CamelModel):
    id: int
    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    full_address: str
