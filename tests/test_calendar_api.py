from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from datebook.db.base import create_db_and_tables, drop_db_and_tables, engine
from datebook.main import app


@pytest_asyncio.fixture(scope="function", autouse=True)
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()
    await engine.dispose()


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def add(client: AsyncClient, title: str, day: str, start=None, end=None) -> dict:
    body = {"title": title, "date": day}
    if start:
        body.update(startTime=start, endTime=end)
    response = await client.post("/v1/events", json=body)
    assert response.status_code == 201
    return response.json()[0]


@pytest.mark.asyncio
async def test_month_grid(client: AsyncClient):
    await add(client, "Leading", "2024-12-30")
    await add(client, "Mid", "2025-01-15", "09:00", "10:00")
    await add(client, "Outside", "2025-03-01")

    response = await client.get("/v1/calendar/month", params={"date": "2025-01-15"})
    assert response.status_code == 200
    cells = response.json()
    assert len(cells) == 35
    assert cells[0]["date"] == "2024-12-29"
    assert cells[-1]["date"] == "2025-02-01"
    assert [c["isCurrentMonth"] for c in cells[:4]] == [False, False, False, True]

    by_date = {c["date"]: [e["title"] for e in c["events"]] for c in cells}
    assert by_date["2024-12-30"] == ["Leading"]
    assert by_date["2025-01-15"] == ["Mid"]
    assert all("Outside" not in titles for titles in by_date.values())


@pytest.mark.asyncio
async def test_month_grid_options(client: AsyncClient):
    monday = (await client.get("/v1/calendar/month", params={"date": "2025-01-15", "weekStart": 1})).json()
    assert monday[0]["date"] == "2024-12-30"

    padded = (await client.get("/v1/calendar/month", params={"date": "2026-02-01", "sixWeeks": "true"})).json()
    assert len(padded) == 42


@pytest.mark.asyncio
async def test_month_defaults_to_current_month(client: AsyncClient):
    cells = (await client.get("/v1/calendar/month")).json()
    today = date.today().isoformat()
    assert [c["date"] for c in cells if c["isToday"]] == [today]


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["2025-13-01", "tomorrow"])
async def test_month_rejects_malformed_date(client: AsyncClient, bad):
    response = await client.get("/v1/calendar/month", params={"date": bad})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_week_view(client: AsyncClient):
    await add(client, "Friday", "2025-01-03")

    cells = (await client.get("/v1/calendar/week", params={"date": "2025-01-01"})).json()
    assert [c["date"] for c in cells] == [
        "2024-12-29", "2024-12-30", "2024-12-31", "2025-01-01", "2025-01-02", "2025-01-03", "2025-01-04",
    ]
    assert [e["title"] for e in cells[5]["events"]] == ["Friday"]


@pytest.mark.asyncio
async def test_day_view_sorted(client: AsyncClient):
    await add(client, "Late", "2025-01-15", "15:00", "16:00")
    await add(client, "Early", "2025-01-15", "08:00", "09:00")
    await add(client, "All day", "2025-01-15")

    day = (await client.get("/v1/calendar/day", params={"date": "2025-01-15"})).json()
    assert day["date"] == "2025-01-15"
    assert [e["title"] for e in day["events"]] == ["All day", "Early", "Late"]


@pytest.mark.asyncio
async def test_healthz(client: AsyncClient):
    response = await client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["db"] == "ok"
