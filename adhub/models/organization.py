from datetime import datetime
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adhub.database import Base
from adhub.utils.timestamps import utcnow


class Organization(Base):
    """Tenant boundary. Every team, opponent, venue and column hangs off one."""
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default="America/New_York", server_default="America/New_York"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    users: Mapped[list["User"]] = relationship("User", back_populates="organization")
    teams: Mapped[list["Team"]] = relationship("Team", back_populates="organization")
    custom_columns: Mapped[list["CustomColumn"]] = relationship(
        "CustomColumn", back_populates="organization", order_by="CustomColumn.created_at"
    )
