"""
Organization-defined custom columns and validation of Game.custom_data.
"""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from adhub.config import get_settings
from adhub.models import CustomColumn, Game, Team
from adhub.services.csv_codec import BASE_HEADERS
from adhub.services.errors import NotFoundError, ValidationError

settings = get_settings()
logger = logging.getLogger(__name__)

CUSTOM_COLUMN_TYPES = ("text",)
MAX_COLUMN_NAME_LENGTH = 100


def validate_text_length(label: str, value: str | None, max_length: int | None = None) -> None:
    max_length = max_length or settings.max_text_length
    if value is not None and len(value) > max_length:
        raise ValidationError(f"{label} exceeds maximum length of {max_length} characters")


def validate_custom_data(
    custom_data: Any,
    allowed_ids: set[str],
    max_length: int | None = None,
) -> dict[str, str]:
    """
    Check a custom_data mapping against the organization's live columns.

    Keys must be known column ids, values are coerced to str and capped at
    ``max_length``. Empty values are dropped.
    """
    if custom_data is None:
        return {}
    if not isinstance(custom_data, dict):
        raise ValidationError("Custom data must be an object")

    cleaned: dict[str, str] = {}
    for key, value in custom_data.items():
        if key not in allowed_ids:
            raise ValidationError(f"Unknown custom column: {key}")
        if value is None:
            continue
        text = str(value)
        if text == "":
            continue
        validate_text_length(f"Custom column {key}", text, max_length)
        cleaned[key] = text
    return cleaned


def merge_custom_data(
    existing: dict[str, str] | None,
    updates: Any,
    allowed_ids: set[str],
    max_length: int | None = None,
) -> dict[str, str]:
    """Merge updates into existing custom data; null or "" removes a key."""
    if updates is None:
        return dict(existing or {})
    if not isinstance(updates, dict):
        raise ValidationError("Custom data must be an object")

    merged = dict(existing or {})
    for key, value in updates.items():
        if key not in allowed_ids:
            raise ValidationError(f"Unknown custom column: {key}")
        if value is None or value == "":
            merged.pop(key, None)
            continue
        text = str(value)
        validate_text_length(f"Custom column {key}", text, max_length)
        merged[key] = text
    return merged


class CustomColumnService:
    def __init__(self, db: AsyncSession, organization_id: int):
        self.db = db
        self.organization_id = organization_id

    async def list_columns(self) -> list[CustomColumn]:
        result = await self.db.execute(
            select(CustomColumn)
            .where(CustomColumn.organization_id == self.organization_id)
            .order_by(CustomColumn.created_at, CustomColumn.id)
        )
        return list(result.scalars().all())

    async def live_column_ids(self) -> set[str]:
        result = await self.db.execute(
            select(CustomColumn.id).where(CustomColumn.organization_id == self.organization_id)
        )
        return set(result.scalars().all())

    async def create_column(self, name: str, column_type: str = "text") -> CustomColumn:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Column name is required")
        if len(name) > MAX_COLUMN_NAME_LENGTH:
            raise ValidationError(
                f"Column name exceeds maximum length of {MAX_COLUMN_NAME_LENGTH} characters"
            )
        if column_type not in CUSTOM_COLUMN_TYPES:
            raise ValidationError(f"Unsupported column type: {column_type}")
        if name.lower() in {header.lower() for header in BASE_HEADERS}:
            raise ValidationError(f"Column name '{name}' is reserved")

        count = await self.db.scalar(
            select(func.count())
            .select_from(CustomColumn)
            .where(CustomColumn.organization_id == self.organization_id)
        )
        if (count or 0) >= settings.max_custom_columns:
            raise ValidationError(
                f"Maximum of {settings.max_custom_columns} custom columns reached"
            )

        duplicate = await self.db.scalar(
            select(CustomColumn.id).where(
                CustomColumn.organization_id == self.organization_id,
                func.lower(CustomColumn.name) == name.lower(),
            )
        )
        if duplicate is not None:
            raise ValidationError(f"A column named '{name}' already exists")

        column = CustomColumn(name=name, type=column_type, organization_id=self.organization_id)
        self.db.add(column)
        await self.db.commit()
        await self.db.refresh(column)
        logger.info("Created custom column %s for organization_id=%s", column.id, self.organization_id)
        return column

    async def delete_column(self, column_id: str) -> int:
        """Delete a column and strip its key from every game of the organization.

        Returns the number of games whose custom data changed.
        """
        column = await self.db.scalar(
            select(CustomColumn).where(
                CustomColumn.id == column_id,
                CustomColumn.organization_id == self.organization_id,
            )
        )
        if column is None:
            raise NotFoundError("Custom column not found")

        result = await self.db.execute(
            select(Game)
            .join(Team, Game.home_team_id == Team.id)
            .where(Team.organization_id == self.organization_id)
        )
        cleaned = 0
        for game in result.scalars().all():
            if game.custom_data and column_id in game.custom_data:
                data = dict(game.custom_data)
                data.pop(column_id)
                game.custom_data = data
                flag_modified(game, "custom_data")
                cleaned += 1

        await self.db.delete(column)
        await self.db.commit()
        logger.info(
            "Deleted custom column %s for organization_id=%s, cleaned %s games",
            column_id,
            self.organization_id,
            cleaned,
        )
        return cleaned
