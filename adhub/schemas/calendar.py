from datetime import datetime

from pydantic import BaseModel

from adhub.schemas.common import CamelModel


class SyncGameData(CamelModel):
    game_id: int
    event_id: str | None = None
    html_link: str | None = None
    last_synced_at: datetime
    created: bool


class SyncGameResponse(BaseModel):
    success: bool = True
    data: SyncGameData


class BulkSyncItemSchema(CamelModel):
    game_id: int
    success: bool
    error: str | None = None


class BulkSyncData(CamelModel):
    results: list[BulkSyncItemSchema]
    total: int
    succeeded: int
    failed: int


class BulkSyncResponse(BaseModel):
    success: bool = True
    data: BulkSyncData


class CalendarCleanupSchema(CamelModel):
    attempted: int
    succeeded: int
    failed: int


class CalendarStatusResponse(BaseModel):
    connected: bool
