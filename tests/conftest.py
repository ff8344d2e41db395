"""Pytest configuration and fixtures."""

import os
import secrets
import tempfile

import pytest

# Point the app at a throwaway SQLite file before anything imports settings
_TEST_DB_DIR = tempfile.mkdtemp(prefix="gigit-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'gigit_test.db')}"
os.environ["JWT_SECRET_KEY"] = f"test-only-{secrets.token_urlsafe(32)}"
os.environ["SEED_SKILLS_ON_STARTUP"] = "false"
os.environ["SMTP_HOST"] = ""
os.environ["STORAGE_ENDPOINT_URL"] = "https://storage.test.example"
os.environ["STORAGE_ACCESS_KEY_ID"] = "test-access-key"
os.environ["STORAGE_SECRET_ACCESS_KEY"] = "test-secret-key"
os.environ["STORAGE_BUCKET_NAME"] = "gigit-test"
os.environ["STORAGE_PUBLIC_URL"] = "https://cdn.test.example/gigit-test"

from fastapi.testclient import TestClient  # noqa: E402

from gigit.main import app  # noqa: E402
from gigit.db.database import engine, execute_raw_sql  # noqa: E402
from gigit.db.seed import seed_skills  # noqa: E402
from gigit.models import Base  # noqa: E402

PASSWORD = "Password123"


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate the schema and skill catalog for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    seed_skills()
    yield


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def skill_ids():
    """Map of skill name -> id for the seeded catalog."""
    return {r["name"]: r["id"] for r in execute_raw_sql("SELECT id, name FROM skills")}


@pytest.fixture
def login(client):
    def _login(email: str, password: str = PASSWORD) -> dict:
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return _login


@pytest.fixture
def register(client, login):
    """Register an account and return bearer headers for it."""
    def _register(email: str, user_type: str, **extra) -> dict:
        resp = client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "user_type": user_type, **extra}
        )
        assert resp.status_code == 201, resp.text
        return login(email)
    return _register


@pytest.fixture
def make_worker(client, register, skill_ids):
    """Register and onboard a worker. Returns {"headers", "profile"}."""
    def _make(email: str = "worker@test.com", first_name: str = "Jane", last_name: str = "Doe",
              skills=("Plumbing",)) -> dict:
        headers = register(email, "WORKER")
        resp = client.post(
            "/api/workers/onboarding",
            headers=headers,
            json={
                "first_name": first_name,
                "last_name": last_name,
                "headline": "Licensed plumber",
                "location_city": "Austin",
                "location_state": "TX",
                "hourly_rate": 45,
                "skills": [
                    {"skill_id": skill_ids[name], "proficiency_level": "EXPERT", "years_of_experience": 8}
                    for name in skills
                ],
            }
        )
        assert resp.status_code == 200, resp.text
        return {"headers": headers, "profile": resp.json()}
    return _make


@pytest.fixture
def make_business(client, register):
    """Register and onboard a business. Returns {"headers", "profile"}."""
    def _make(email: str = "hiring@acme.com", company_name: str = "Acme Builders") -> dict:
        headers = register(email, "BUSINESS")
        resp = client.post(
            "/api/business/onboarding",
            headers=headers,
            json={"company_name": company_name, "industry": "Construction", "location_city": "Austin"}
        )
        assert resp.status_code == 200, resp.text
        return {"headers": headers, "profile": resp.json()}
    return _make


@pytest.fixture
def make_job(client, skill_ids):
    """Create a job as the given business. Published unless publish=False."""
    def _make(headers: dict, title: str = "Fix office plumbing", publish: bool = True,
              skills=("Plumbing",), **overrides) -> dict:
        payload = {
            "title": title,
            "description": "Replace pipes and fixtures in a two-floor office.",
            "required_skills": [skill_ids[name] for name in skills],
            "budget_min": 30,
            "budget_max": 60,
            "job_location_city": "Austin",
            "job_location_state": "TX",
            "publish": publish,
            **overrides,
        }
        resp = client.post("/api/jobs", headers=headers, json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture
def worker(make_worker):
    return make_worker()


@pytest.fixture
def business(make_business):
    return make_business()
