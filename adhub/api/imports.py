from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.api.deps import CurrentUser, get_current_user, get_db
from adhub.schemas.imports import BatchImportRequest, ImportReportSchema, ImportResponse
from adhub.services.game_import import GameImportService

router = APIRouter(prefix="/import", tags=["import"])


@router.post("/games", response_model=ImportResponse)
async def import_games_csv(
    file: UploadFile | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Import games from an uploaded CSV file. Bad rows are reported, not fatal."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    raw = await file.read()
    text = raw.decode("utf-8-sig", errors="replace")

    service = GameImportService(db, current_user.organization_id, current_user.user_id)
    report = await service.import_csv(text)
    return ImportResponse(data=ImportReportSchema.model_validate(report))


@router.post("/games/batch", response_model=ImportResponse)
async def import_games_batch(
    body: BatchImportRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Import games from already-structured JSON rows."""
    if not isinstance(body.games, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid games data")

    service = GameImportService(db, current_user.organization_id, current_user.user_id)
    report = await service.import_rows(body.games)
    return ImportResponse(data=ImportReportSchema.model_validate(report))
