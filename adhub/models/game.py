import enum
from datetime import datetime, date
from sqlalchemy import BigInteger, Integer, String, Text, Date, Boolean, DateTime, Float, ForeignKey, Index, Enum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adhub.database import Base
from adhub.utils.timestamps import utcnow


class GameStatus(str, enum.Enum):
    """Game lifecycle status."""
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    POSTPONED = "POSTPONED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (
        Index("ix_games_home_team_date", "home_team_id", "date"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    time: Mapped[str | None] = mapped_column(String(20))  # "19:00"
    status: Mapped[GameStatus] = mapped_column(
        Enum(GameStatus), nullable=False, default=GameStatus.SCHEDULED, server_default="SCHEDULED"
    )
    is_home: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    notes: Mapped[str | None] = mapped_column(Text)

    # Custom column id -> value, keys are CustomColumn.id of the owning organization
    custom_data: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    # Travel
    travel_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    bus_travel: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    estimated_travel_time: Mapped[int | None] = mapped_column(Integer)  # minutes
    departure_time: Mapped[datetime | None] = mapped_column(DateTime)
    arrival_time: Mapped[datetime | None] = mapped_column(DateTime)
    bus_count: Mapped[int | None] = mapped_column(Integer)
    travel_cost: Mapped[float | None] = mapped_column(Float)

    home_team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    opponent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("opponents.id"), index=True)
    venue_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("venues.id"), index=True)
    created_by_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    # Google Calendar linkage, written only by the calendar sync service
    google_calendar_event_id: Mapped[str | None] = mapped_column(String(255))
    google_calendar_html_link: Mapped[str | None] = mapped_column(String(500))
    calendar_synced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    home_team: Mapped["Team"] = relationship("Team", back_populates="home_games")
    opponent: Mapped["Opponent"] = relationship("Opponent", back_populates="games")
    venue: Mapped["Venue"] = relationship("Venue", back_populates="games")
    created_by: Mapped["User"] = relationship("User")
