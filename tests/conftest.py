import pytest
from datetime import timedelta
from typing import AsyncGenerator
from unittest.mock import AsyncMock

from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from adhub.main import app
from adhub.database import Base
from adhub.api.deps import get_db, get_calendar_client_factory
from adhub.models import (
    Organization, User, Sport, SportSeason, Team, TeamLevel,
    Opponent, Venue, CustomColumn, Game, GameStatus,
)
from adhub.security.jwt import create_access_token
from adhub.services.errors import CalendarNotConnectedError
from adhub.utils.timestamps import utc_today


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Make PostgreSQL types work with SQLite
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB

@compiles(JSONB, "sqlite")
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


class FakeCalendarClientFactory:
    """Hands out one shared fake client, refusing users without stored credentials."""

    def __init__(self, client):
        self.client = client
        self.requested_user_ids: list[int] = []

    def for_user(self, user):
        if not user.calendar_connected:
            raise CalendarNotConnectedError()
        self.requested_user_ids.append(user.id)
        return self.client


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN, which breaks SAVEPOINT; emit it ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def calendar_client() -> AsyncMock:
    """Fake Google Calendar client; each insert returns a fresh event id."""
    client = AsyncMock()
    counter = {"n": 0}

    async def insert_event(event):
        counter["n"] += 1
        return {"id": f"evt-{counter['n']}", "htmlLink": f"https://calendar.google.com/evt-{counter['n']}"}

    async def update_event(event_id, event):
        return {"id": event_id, "htmlLink": f"https://calendar.google.com/{event_id}?updated"}

    client.insert_event.side_effect = insert_event
    client.update_event.side_effect = update_event
    client.delete_event.return_value = None
    return client


@pytest.fixture
def calendar_factory(calendar_client) -> FakeCalendarClientFactory:
    return FakeCalendarClientFactory(calendar_client)


@pytest.fixture(scope="function")
async def client(test_session, calendar_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database and calendar dependencies."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_client_factory] = lambda: calendar_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Data Fixtures ---

@pytest.fixture
async def sample_org(test_session) -> Organization:
    org = Organization(id=1, name="Lincoln High")
    test_session.add(org)
    await test_session.commit()
    await test_session.refresh(org)
    return org


@pytest.fixture
async def other_org(test_session) -> Organization:
    org = Organization(id=2, name="Roosevelt High")
    test_session.add(org)
    await test_session.commit()
    await test_session.refresh(org)
    return org


@pytest.fixture
async def sample_user(test_session, sample_org) -> User:
    """User with a connected Google Calendar."""
    user = User(
        id=10,
        email="ad@lincoln.edu",
        name="Pat Director",
        organization_id=sample_org.id,
        google_calendar_refresh_token="refresh-token",
        google_calendar_access_token="access-token",
    )
    test_session.add(user)
    await test_session.commit()
    await test_session.refresh(user)
    return user


@pytest.fixture
async def disconnected_user(test_session, sample_org) -> User:
    user = User(id=11, email="coach@lincoln.edu", name="Sam Coach", organization_id=sample_org.id)
    test_session.add(user)
    await test_session.commit()
    await test_session.refresh(user)
    return user


@pytest.fixture
async def sample_sport(test_session) -> Sport:
    sport = Sport(id=1, name="Football", season=SportSeason.FALL)
    test_session.add(sport)
    await test_session.commit()
    await test_session.refresh(sport)
    return sport


@pytest.fixture
async def sample_team(test_session, sample_org, sample_sport) -> Team:
    team = Team(
        id=1,
        name="Varsity Football",
        sport_id=sample_sport.id,
        level=TeamLevel.VARSITY,
        organization_id=sample_org.id,
    )
    test_session.add(team)
    await test_session.commit()
    await test_session.refresh(team)
    return team


@pytest.fixture
async def jv_team(test_session, sample_org, sample_sport) -> Team:
    team = Team(
        id=2,
        name="JV Football",
        sport_id=sample_sport.id,
        level=TeamLevel.JV,
        organization_id=sample_org.id,
    )
    test_session.add(team)
    await test_session.commit()
    await test_session.refresh(team)
    return team


@pytest.fixture
async def sample_opponent(test_session, sample_org) -> Opponent:
    opponent = Opponent(id=1, name="Oakwood", organization_id=sample_org.id)
    test_session.add(opponent)
    await test_session.commit()
    await test_session.refresh(opponent)
    return opponent


@pytest.fixture
async def sample_venue(test_session, sample_org) -> Venue:
    venue = Venue(
        id=1,
        name="Oakwood Stadium",
        address="100 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        organization_id=sample_org.id,
    )
    test_session.add(venue)
    await test_session.commit()
    await test_session.refresh(venue)
    return venue


@pytest.fixture
async def sample_column(test_session, sample_org) -> CustomColumn:
    column = CustomColumn(id="custom_1700000000000_abc123xyz", name="Referee", organization_id=sample_org.id)
    test_session.add(column)
    await test_session.commit()
    await test_session.refresh(column)
    return column


@pytest.fixture
async def sample_game(test_session, sample_team, sample_opponent, sample_user) -> Game:
    """Upcoming home game created by sample_user."""
    game = Game(
        id=100,
        date=utc_today() + timedelta(days=7),
        time="19:00",
        status=GameStatus.SCHEDULED,
        is_home=True,
        home_team_id=sample_team.id,
        opponent_id=sample_opponent.id,
        created_by_id=sample_user.id,
        custom_data={},
    )
    test_session.add(game)
    await test_session.commit()
    await test_session.refresh(game)
    return game


@pytest.fixture
def auth_headers(sample_user) -> dict[str, str]:
    token = create_access_token(user_id=sample_user.id, organization_id=sample_user.organization_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def disconnected_headers(disconnected_user) -> dict[str, str]:
    token = create_access_token(
        user_id=disconnected_user.id, organization_id=disconnected_user.organization_id
    )
    return {"Authorization": f"Bearer {token}"}

