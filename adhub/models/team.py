import enum
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adhub.database import Base
from adhub.utils.timestamps import utcnow


class TeamLevel(str, enum.Enum):
    VARSITY = "VARSITY"
    JV = "JV"
    FRESHMAN = "FRESHMAN"
    MIDDLE_SCHOOL = "MIDDLE_SCHOOL"
    YOUTH = "YOUTH"


class Team(Base):
    """A level + sport combination inside one organization, e.g. Varsity Football."""
    __tablename__ = "teams"
    __table_args__ = (
        Index("ix_teams_org_sport_level", "organization_id", "sport_id", "level"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sport_id: Mapped[int] = mapped_column(Integer, ForeignKey("sports.id"), nullable=False, index=True)
    level: Mapped[TeamLevel] = mapped_column(
        Enum(TeamLevel), nullable=False, default=TeamLevel.VARSITY, server_default="VARSITY"
    )
    gender: Mapped[str | None] = mapped_column(String(20))  # MALE, FEMALE, COED
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organizations.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    sport: Mapped["Sport"] = relationship("Sport", back_populates="teams")
    organization: Mapped["Organization"] = relationship("Organization", back_populates="teams")
    home_games: Mapped[list["Game"]] = relationship("Game", back_populates="home_team")
