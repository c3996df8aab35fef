from adhub.schemas.common import CamelModel, MessageResponse
from adhub.schemas.game import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    GameCreate,
    GameDeleteResponse,
    GameListResponse,
    GameResponse,
    GameUpdate,
)
from adhub.schemas.imports import BatchImportRequest, ImportReportSchema, ImportResponse
from adhub.schemas.calendar import (
    BulkSyncData,
    BulkSyncResponse,
    CalendarCleanupSchema,
    CalendarStatusResponse,
    SyncGameData,
    SyncGameResponse,
)
from adhub.schemas.custom_column import (
    CustomColumnCreate,
    CustomColumnDeleteResponse,
    CustomColumnResponse,
)
from adhub.schemas.reference import OpponentResponse, SportResponse, TeamResponse, VenueResponse
