from fastapi import APIRouter

from adhub.api.calendar import router as calendar_router
from adhub.api.custom_columns import router as custom_columns_router
from adhub.api.exports import router as exports_router
from adhub.api.games import router as games_router
from adhub.api.imports import router as imports_router
from adhub.api.references import router as references_router
from adhub.api.users import router as users_router

api_router = APIRouter()

# Schedule exchange
api_router.include_router(imports_router)
api_router.include_router(exports_router)
api_router.include_router(calendar_router)

# Games and organization data
api_router.include_router(games_router)
api_router.include_router(custom_columns_router)
api_router.include_router(references_router)
api_router.include_router(users_router)
