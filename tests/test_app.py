"""App shell, skills catalog and seed data."""

import logging

from fastapi.testclient import TestClient

from gigit.core.logging_config import setup_logging
from gigit.db.database import execute_raw_sql
from gigit.db.seed import SKILL_CATALOG, seed_demo_accounts, seed_skills
from gigit.main import app


def test_root_and_health(client):
    assert client.get("/").json()["app"] == "GigIt"
    health = client.get("/health").json()
    assert health == {"status": "healthy", "database": "connected"}


def test_lifespan_starts_cleanly():
    with TestClient(app) as lifespan_client:
        assert lifespan_client.get("/health").status_code == 200


def test_skill_catalog_seeded_once():
    assert len(execute_raw_sql("SELECT id FROM skills")) == 31
    assert sum(len(names) for names in SKILL_CATALOG.values()) == 31
    assert seed_skills() == 0


def test_list_skills(client):
    skills = client.get("/api/skills").json()
    assert len(skills) == 31
    assert skills == sorted(skills, key=lambda s: (s["category"], s["name"]))

    automotive = client.get("/api/skills", params={"category": "Automotive"}).json()
    assert [s["name"] for s in automotive] == ["Auto Body Repair", "Auto Mechanics", "Auto Painting"]

    search = client.get("/api/skills", params={"search": "weld"}).json()
    assert [s["name"] for s in search] == ["Welding"]
    assert client.get("/api/skills", params={"search": "%"}).json() == []


def test_skill_categories(client):
    categories = client.get("/api/skills/categories").json()
    assert len(categories) == 7
    assert categories == sorted(categories)


def test_demo_accounts_can_login(client, login):
    seed_demo_accounts()
    seed_demo_accounts()

    headers = login("worker@example.com", "Worker@123")
    profile = client.get("/api/workers/profile", headers=headers).json()
    assert profile["first_name"] == "John"
    assert {s["name"] for s in profile["skills"]} == {"Plumbing", "Welding"}
    assert login("business@example.com", "Business@123")
    assert len(execute_raw_sql("SELECT id FROM users")) == 3


def test_setup_logging_level_override():
    setup_logging("warning")
    assert logging.getLogger("gigit").level == logging.WARNING

    setup_logging()
    assert logging.getLogger("gigit").level == logging.INFO
