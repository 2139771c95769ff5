import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from wapwatch.db.session import get_db
from wapwatch.main import app
from wapwatch.services.parser import parse_line
from wapwatch.services.wap import upsert_wap

from conftest import WPA2_LINE, OPEN_LINE


@pytest.fixture
async def api(session_factory):
    async def override():
        async with session_factory() as session:
            yield session

    async with session_factory() as db:
        async with db.begin():
            await upsert_wap(db, parse_line(WPA2_LINE))
            await upsert_wap(db, parse_line(OPEN_LINE))

    app.dependency_overrides[get_db] = override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(api):
    response = await api.get("/")
    assert response.status_code == 200
    assert response.json() == {"db_ok": True}


@pytest.mark.asyncio
async def test_list_waps(api):
    response = await api.get("/v1/waps/")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {item["bssid"] for item in body["items"]} == {"AA:BB:CC:DD:EE:FF", "11:22:33:44:55:66"}


@pytest.mark.asyncio
async def test_list_waps_filter_by_security(api):
    response = await api.get("/v1/waps/", params={"security": "Open"})
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["ssid"] == "CoffeeShop"
    assert body["items"][0]["visible"] is True


@pytest.mark.asyncio
async def test_get_wap_by_bssid(api):
    response = await api.get("/v1/waps/AA:BB:CC:DD:EE:FF")
    assert response.status_code == 200
    data = response.json()
    assert data["ssid"] == "MyWifi"
    assert data["chan"] == 6
    assert data["freq"] == 2437
    assert data["in_use"] is True


@pytest.mark.asyncio
async def test_unknown_bssid_returns_404(api):
    response = await api.get("/v1/waps/00:00:00:00:00:00")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_list_bad_limit_returns_422():
    client = TestClient(app)
    response = client.get("/v1/waps/", params={"limit": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_health_reports_broken_db():
    class BrokenSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    async def override():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    assert response.json() == {"db_ok": False}
