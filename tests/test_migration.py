import json

import pytest
from httpx import AsyncClient

from catalog import PROJECT_CATALOG
from database import PROJECTS
from errors import ServiceUnavailableError
from migration import MigrationRunner, load_catalog
from services import ProjectService


@pytest.fixture
def runner(database) -> MigrationRunner:
    return MigrationRunner(ProjectService(database))


def test_first_run_adds_whole_catalog(runner, database):
    result = runner.run(PROJECT_CATALOG)

    assert result == {"added": 9, "updated": 0, "skipped": 0, "total": 9}
    assert database.count_documents(PROJECTS) == 9


def test_second_run_updates_without_duplicating(runner, database):
    runner.run(PROJECT_CATALOG)

    result = runner.run(PROJECT_CATALOG)

    assert result == {"added": 0, "updated": 9, "skipped": 0, "total": 9}
    assert database.count_documents(PROJECTS) == 9


def test_rerun_overwrites_edited_fields(runner, database):
    runner.run(PROJECT_CATALOG)
    database.collection(PROJECTS).update_one({"id": "1"}, {"$set": {"title": "Edited by hand"}})

    runner.run(PROJECT_CATALOG)

    seed = next(project for project in PROJECT_CATALOG if project["id"] == "1")
    assert database.get_documents(PROJECTS, {"id": "1"})[0]["title"] == seed["title"]


def test_invalid_seed_is_skipped(runner, database):
    catalog = [
        {"id": "a", "title": "Ok", "description": "Fine", "category": "web"},
        {"id": "b", "description": "No title", "category": "web"},
        {"title": "No id", "description": "Missing id", "category": "app"},
        {"id": "c", "title": "Ok too", "description": "Fine", "category": "app"},
    ]

    result = runner.run(catalog)

    assert result == {"added": 2, "updated": 0, "skipped": 2, "total": 4}
    assert sorted(doc["id"] for doc in database.get_documents(PROJECTS)) == ["a", "c"]


def test_run_fails_fast_when_database_down(offline_database):
    with pytest.raises(ServiceUnavailableError):
        MigrationRunner(ProjectService(offline_database)).run(PROJECT_CATALOG)


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps([{"id": "x", "title": "X", "description": "d", "category": "web"}]), encoding="utf-8")

    assert load_catalog(str(path))[0]["id"] == "x"
    assert len(load_catalog(None)) == len(PROJECT_CATALOG)


def test_load_catalog_rejects_non_list(tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps({"id": "x"}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_catalog(str(path))


@pytest.mark.asyncio
async def test_migrate_route(client: AsyncClient, auth_headers):
    response = await client.post("/api/migrate/projects", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert (data["added"], data["updated"], data["skipped"], data["total"]) == (9, 0, 0, 9)

    listing = await client.get("/api/projects", params={"limit": 100})
    assert listing.json()["total"] == 9


@pytest.mark.asyncio
async def test_migrate_route_requires_auth(client: AsyncClient, database):
    response = await client.post("/api/migrate/projects")

    assert response.status_code == 401
    assert database.count_documents(PROJECTS) == 0
