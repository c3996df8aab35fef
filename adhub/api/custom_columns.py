from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from adhub.api.deps import CurrentUser, get_current_user, get_db
from adhub.api.errors import http_error
from adhub.schemas.custom_column import (
    CustomColumnCreate,
    CustomColumnDeleteResponse,
    CustomColumnResponse,
)
from adhub.services.custom_columns import CustomColumnService
from adhub.services.errors import ServiceError

router = APIRouter(prefix="/organizations/custom-columns", tags=["custom-columns"])


@router.get("", response_model=list[CustomColumnResponse])
async def list_custom_columns(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    columns = await CustomColumnService(db, current_user.organization_id).list_columns()
    return [CustomColumnResponse.model_validate(c) for c in columns]


@router.post("", response_model=CustomColumnResponse, status_code=status.HTTP_201_CREATED)
async def create_custom_column(
    data: CustomColumnCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        column = await CustomColumnService(db, current_user.organization_id).create_column(
            data.name, data.type
        )
    except ServiceError as e:
        raise http_error(e)
    return CustomColumnResponse.model_validate(column)


@router.delete("/{column_id}", response_model=CustomColumnDeleteResponse)
async def delete_custom_column(
    column_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a column and remove its values from every game of the organization."""
    try:
        cleaned = await CustomColumnService(db, current_user.organization_id).delete_column(column_id)
    except ServiceError as e:
        raise http_error(e)
    return CustomColumnDeleteResponse(cleaned_games=cleaned)
