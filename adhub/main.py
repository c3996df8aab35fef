import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adhub.config import get_settings
from adhub.database import engine
from adhub.services.google_calendar import CalendarClientFactory

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    app.state.calendar_client_factory = CalendarClientFactory(settings)
    yield
    # Shutdown
    await app.state.calendar_client_factory.aclose()
    await engine.dispose()


app = FastAPI(
    title="AD Hub Backend",
    description="Game schedule import/export and Google Calendar sync for athletic departments",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
_origins = (
    settings.allowed_origins.split(",")
    if settings.allowed_origins != "*"
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Import and include routers after app is created
from adhub.api.router import api_router
app.include_router(api_router, prefix="/api/v1")
