import enum
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adhub.database import Base
from adhub.utils.timestamps import utcnow


class SportSeason(str, enum.Enum):
    FALL = "FALL"
    WINTER = "WINTER"
    SPRING = "SPRING"
    SUMMER = "SUMMER"


class Sport(Base):
    """Sports are shared across organizations; teams carry the tenant."""
    __tablename__ = "sports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    season: Mapped[SportSeason] = mapped_column(
        Enum(SportSeason), nullable=False, default=SportSeason.FALL, server_default="FALL"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    teams: Mapped[list["Team"]] = relationship("Team", back_populates="sport")
