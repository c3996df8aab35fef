from datetime import datetime

from pydantic import BaseModel, Field

from adhub.schemas.common import CamelModel


class CustomColumnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: str = "text"


class CustomColumnResponse(CamelModel):
    id: str
    name: str
    type: str
    created_at: datetime | None = None


class CustomColumnDeleteResponse(CamelModel):
    success: bool = True
    cleaned_games: int
