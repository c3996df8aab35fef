from adhub.models.organization import Organization
from adhub.models.user import User
from adhub.models.sport import Sport, SportSeason
from adhub.models.team import Team, TeamLevel
from adhub.models.opponent import Opponent
from adhub.models.venue import Venue
from adhub.models.custom_column import CustomColumn, generate_custom_column_id
from adhub.models.game import Game, GameStatus

__all__ = [
    "Organization",
    "User",
    "Sport",
    "SportSeason",
    "Team",
    "TeamLevel",
    "Opponent",
    "Venue",
    "CustomColumn",
    "generate_custom_column_id",
    "Game",
    "GameStatus",
]
