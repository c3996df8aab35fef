import secrets
import string
import time
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from adhub.database import Base
from adhub.utils.timestamps import utcnow

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_custom_column_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"custom_{int(time.time() * 1000)}_{suffix}"


class CustomColumn(Base):
    """Organization-defined game field. Its id is the key into Game.custom_data."""
    __tablename__ = "custom_columns"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_custom_column_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="text", server_default="text")
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    organization: Mapped["Organization"] = relationship("Organization", back_populates="custom_columns")
