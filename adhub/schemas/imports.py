from typing import Any

from pydantic import BaseModel

from adhub.schemas.common import CamelModel


class ImportReportSchema(CamelModel):
    success_count: int
    failed_count: int
    errors: list[str]


class ImportResponse(BaseModel):
    success: bool = True
    data: ImportReportSchema


class BatchImportRequest(BaseModel):
    # Rows are validated one by one so a malformed row only fails itself
    games: Any = None
