from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from database import VISITORS
from visitors import DEDUPED, STORED, VisitorLog

T0 = datetime(2025, 3, 14, 12, 0, 0)
CHROME = "Mozilla/5.0 (Macintosh) Chrome/120.0"


@pytest.fixture
def visitor_log(database) -> VisitorLog:
    return VisitorLog(database)


def test_repeat_within_window_refreshes_date(visitor_log, database):
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0) == STORED
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=3)) == DEDUPED

    rows = database.get_documents(VISITORS)
    assert len(rows) == 1
    assert rows[0]["date"] == T0 + timedelta(seconds=3)


def test_repeat_after_window_is_stored(visitor_log, database):
    visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0)

    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=6)) == STORED
    assert database.count_documents(VISITORS) == 2


def test_window_edges(visitor_log, database):
    visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0)

    # lower bound is inclusive
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=5)) == DEDUPED
    # upper bound is exclusive, so the same instant again is a new visit
    same_instant = T0 + timedelta(seconds=30)
    assert visitor_log.record_visit("9.9.9.9", CHROME, "/", now=same_instant) == STORED
    assert visitor_log.record_visit("9.9.9.9", CHROME, "/", now=same_instant) == STORED
    assert database.count_documents(VISITORS) == 3


def test_repeat_chains_off_refreshed_date(visitor_log, database):
    visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0)
    visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=3))

    # 7s after the first hit but 4s after the refresh
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=7)) == DEDUPED
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=13)) == STORED
    assert database.count_documents(VISITORS) == 2


def test_recent_row_matched_by_created_at(visitor_log, database):
    database.collection(VISITORS).insert_one({
        "ip": "1.2.3.4",
        "userAgent": CHROME,
        "path": "/",
        "date": T0 - timedelta(days=1),
        "createdAt": T0,
    })

    assert visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0 + timedelta(seconds=2)) == DEDUPED
    assert database.count_documents(VISITORS) == 1


def test_window_is_per_ip_agent_and_path(visitor_log, database):
    visitor_log.record_visit("1.2.3.4", CHROME, "/", now=T0)
    later = T0 + timedelta(seconds=1)

    assert visitor_log.record_visit("5.6.7.8", CHROME, "/", now=later) == STORED
    assert visitor_log.record_visit("1.2.3.4", "curl/8.0", "/", now=later) == STORED
    assert visitor_log.record_visit("1.2.3.4", CHROME, "/about", now=later) == STORED
    assert database.count_documents(VISITORS) == 4


def test_missing_path_defaults_to_root(visitor_log, database):
    visitor_log.record_visit(None, None, None, now=T0)

    row = database.get_documents(VISITORS)[0]
    assert row["path"] == "/"
    assert row["createdAt"] == T0


def test_stats_counts_today_and_total(visitor_log):
    visitor_log.record_visit("1.1.1.1", CHROME, "/", now=T0 - timedelta(days=1))
    visitor_log.record_visit("1.1.1.1", CHROME, "/", now=T0)
    visitor_log.record_visit("2.2.2.2", CHROME, "/", now=T0)

    assert visitor_log.stats(now=T0 + timedelta(hours=1)) == {"today": 2, "total": 3}


def test_stats_takes_larger_of_date_and_created_counts(visitor_log, database):
    yesterday = T0 - timedelta(days=1)
    database.collection(VISITORS).insert_many([
        # imported rows whose event date predates the import
        {"ip": "a", "path": "/", "date": yesterday, "createdAt": T0},
        {"ip": "b", "path": "/", "date": yesterday, "createdAt": T0},
        # row written without a creation stamp
        {"ip": "c", "path": "/", "date": T0},
    ])

    assert visitor_log.stats(now=T0) == {"today": 2, "total": 3}


def test_stats_day_follows_configured_timezone(database):
    seoul = VisitorLog(database, "Asia/Seoul")
    utc = VisitorLog(database)
    # 23:00 in Seoul on the 14th, 01:00 on the 15th once the query runs
    seoul.record_visit("1.1.1.1", CHROME, "/", now=datetime(2025, 3, 14, 14, 0))
    now = datetime(2025, 3, 14, 16, 0)

    assert seoul.stats(now=now)["today"] == 0
    assert utc.stats(now=now)["today"] == 1


def test_unknown_timezone_falls_back_to_utc(database):
    assert VisitorLog(database, "Mars/Olympus_Mons").tz.key == "UTC"


@pytest.mark.asyncio
async def test_log_visit_uses_request_headers(client: AsyncClient, database):
    response = await client.post(
        "/api/visitors",
        json={"path": "/work"},
        headers={"User-Agent": CHROME, "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Visit recorded", "deduplicated": False}
    row = database.get_documents(VISITORS)[0]
    assert row["ip"] == "203.0.113.7"
    assert row["userAgent"] == CHROME
    assert row["path"] == "/work"


@pytest.mark.asyncio
async def test_log_visit_twice_counts_once(client: AsyncClient, database):
    body = {"ip": "198.51.100.2", "userAgent": CHROME, "path": "/"}
    await client.post("/api/visitors", json=body)
    response = await client.post("/api/visitors", json=body)

    assert response.json()["deduplicated"] is True
    assert database.count_documents(VISITORS) == 1


@pytest.mark.asyncio
async def test_log_visit_without_body(client: AsyncClient, database):
    response = await client.post("/api/visitors")

    assert response.status_code == 200
    assert database.get_documents(VISITORS)[0]["path"] == "/"


@pytest.mark.asyncio
async def test_stats_and_list_routes(client: AsyncClient):
    await client.post("/api/visitors", json={"ip": "1.1.1.1", "path": "/"})
    await client.post("/api/visitors", json={"ip": "2.2.2.2", "path": "/"})

    stats = await client.get("/api/visitors/stats")
    assert stats.json() == {"success": True, "today": 2, "total": 2}

    listing = await client.get("/api/visitors", params={"limit": 1})
    data = listing.json()
    assert data["total"] == 2
    assert len(data["data"]) == 1


@pytest.mark.asyncio
async def test_visitors_fail_fast_when_database_down(offline_client: AsyncClient):
    response = await offline_client.post("/api/visitors", json={"path": "/"})

    assert response.status_code == 503
