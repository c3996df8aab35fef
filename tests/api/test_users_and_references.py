import pytest
from httpx import AsyncClient

from adhub.security.jwt import create_access_token


@pytest.mark.asyncio
class TestUserCalendarAPI:
    async def test_calendar_status(self, client: AsyncClient, auth_headers, disconnected_headers):
        response = await client.get("/api/v1/user/calendar-status", headers=auth_headers)
        assert response.json() == {"connected": True}

        response = await client.get("/api/v1/user/calendar-status", headers=disconnected_headers)
        assert response.json() == {"connected": False}

    async def test_disconnect_clears_tokens(self, client: AsyncClient, sample_user, auth_headers):
        response = await client.post("/api/v1/user/calendar-disconnect", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Google Calendar disconnected"}
        assert sample_user.google_calendar_refresh_token is None
        assert sample_user.google_calendar_access_token is None

        status = await client.get("/api/v1/user/calendar-status", headers=auth_headers)
        assert status.json() == {"connected": False}

    async def test_unknown_user(self, client: AsyncClient, sample_org):
        token = create_access_token(user_id=404, organization_id=sample_org.id)
        response = await client.get("/api/v1/user/calendar-status", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 404

    async def test_expired_token(self, client: AsyncClient, sample_user):
        token = create_access_token(user_id=sample_user.id, organization_id=sample_user.organization_id, ttl_minutes=-1)
        response = await client.get("/api/v1/user/calendar-status", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


@pytest.mark.asyncio
class TestReferenceAPI:
    async def test_lists_scoped_to_organization(
        self, client: AsyncClient, sample_team, sample_opponent, sample_venue, other_org, auth_headers
    ):
        sports = (await client.get("/api/v1/sports", headers=auth_headers)).json()
        assert [s["name"] for s in sports] == ["Football"]

        teams = (await client.get("/api/v1/teams", headers=auth_headers)).json()
        assert teams[0]["level"] == "VARSITY"
        assert teams[0]["sport"]["name"] == "Football"

        opponents = (await client.get("/api/v1/opponents", headers=auth_headers)).json()
        assert [o["name"] for o in opponents] == ["Oakwood"]

        venues = (await client.get("/api/v1/venues", headers=auth_headers)).json()
        assert venues[0]["fullAddress"] == "Oakwood Stadium, 100 Main St, Springfield, IL 62701"
        assert venues[0]["zipCode"] == "62701"

        token = create_access_token(user_id=99, organization_id=other_org.id)
        other = await client.get("/api/v1/teams", headers={"Authorization": f"Bearer {token}"})
        assert other.json() == []


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
