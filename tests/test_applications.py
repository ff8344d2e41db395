"""Hiring flow: application status transitions, contracts and notifications."""

import pytest

from gigit.core.exceptions import InvalidStatusTransition
from gigit.db.database import execute_raw_sql
from gigit.services.application_service import (
    check_application_transition, check_contract_transition
)


@pytest.fixture
def applied(client, business, worker, make_job):
    """A published job with one PENDING application from the worker."""
    job = make_job(business["headers"], job_type="BULK", number_of_workers_needed=3)
    resp = client.post(f"/api/jobs/{job['id']}/apply", headers=worker["headers"], json={"proposed_rate": 42.5})
    assert resp.status_code == 201
    return {"job": job, "application": resp.json()}


def _patch_status(client, headers, application_id, status):
    return client.patch(f"/api/business/applications/{application_id}", headers=headers, json={"status": status})


@pytest.mark.parametrize("current,requested", [
    ("PENDING", "REVIEWED"),
    ("PENDING", "ACCEPTED"),
    ("REVIEWED", "SHORTLISTED"),
    ("SHORTLISTED", "ACCEPTED"),
    ("SHORTLISTED", "REJECTED"),
])
def test_allowed_application_transitions(current, requested):
    check_application_transition(current, requested)


@pytest.mark.parametrize("current,requested", [
    ("ACCEPTED", "REJECTED"),
    ("REJECTED", "ACCEPTED"),
    ("WITHDRAWN", "SHORTLISTED"),
    ("SHORTLISTED", "REVIEWED"),
    ("PENDING", "PENDING"),
    ("PENDING", "WITHDRAWN"),
])
def test_disallowed_application_transitions(current, requested):
    with pytest.raises(InvalidStatusTransition):
        check_application_transition(current, requested)


def test_contract_transitions():
    check_contract_transition("ACTIVE", "COMPLETED")
    check_contract_transition("PENDING", "ACTIVE")
    with pytest.raises(InvalidStatusTransition):
        check_contract_transition("COMPLETED", "ACTIVE")


def test_shortlist_notifies_worker(client, business, worker, applied):
    resp = _patch_status(client, business["headers"], applied["application"]["id"], "SHORTLISTED")

    assert resp.status_code == 200
    assert resp.json()["status"] == "SHORTLISTED"
    assert resp.json()["reviewed_at"] is not None

    notes = client.get("/api/notifications", headers=worker["headers"]).json()["notifications"]
    assert notes[0]["type"] == "JOB_APPLICATION"
    assert notes[0]["title"] == "Application Shortlisted"
    assert notes[0]["link"] == "/applications"
    assert "Acme Builders" in notes[0]["message"]


def test_accept_creates_contract(client, business, worker, applied):
    resp = _patch_status(client, business["headers"], applied["application"]["id"], "ACCEPTED")
    assert resp.status_code == 200

    contracts = execute_raw_sql("SELECT contract_type, status, agreed_rate FROM contracts")
    assert contracts == [{"contract_type": "BULK_MEMBER", "status": "ACTIVE", "agreed_rate": 42.5}]

    notes = client.get("/api/notifications", headers=worker["headers"]).json()["notifications"]
    assert notes[0]["type"] == "JOB_ACCEPTED"
    assert notes[0]["title"] == "Application Accepted"


def test_accept_without_proposed_rate_uses_budget_min(client, business, worker, make_job):
    job = make_job(business["headers"], budget_min=35, budget_max=70)
    application = client.post(f"/api/jobs/{job['id']}/apply", headers=worker["headers"]).json()

    _patch_status(client, business["headers"], application["id"], "ACCEPTED")

    contract = execute_raw_sql("SELECT contract_type, agreed_rate FROM contracts")[0]
    assert contract == {"contract_type": "INDIVIDUAL", "agreed_rate": 35}


def test_accept_is_terminal_and_never_duplicates_contract(client, business, applied):
    application_id = applied["application"]["id"]
    assert _patch_status(client, business["headers"], application_id, "ACCEPTED").status_code == 200

    again = _patch_status(client, business["headers"], application_id, "ACCEPTED")

    assert again.status_code == 400
    assert again.json()["error"] == "invalid_status_transition"
    assert len(execute_raw_sql("SELECT id FROM contracts")) == 1


def test_rejected_cannot_be_accepted(client, business, worker, applied):
    application_id = applied["application"]["id"]
    _patch_status(client, business["headers"], application_id, "REJECTED")

    resp = _patch_status(client, business["headers"], application_id, "ACCEPTED")

    assert resp.status_code == 400
    assert execute_raw_sql("SELECT id FROM contracts") == []
    notes = client.get("/api/notifications", headers=worker["headers"]).json()["notifications"]
    assert [n["type"] for n in notes] == ["JOB_REJECTED"]


def test_failed_transition_rolls_back(client, business, worker, applied):
    application_id = applied["application"]["id"]
    _patch_status(client, business["headers"], application_id, "REJECTED")
    _patch_status(client, business["headers"], application_id, "SHORTLISTED")

    status = execute_raw_sql("SELECT status FROM job_applications")[0]["status"]
    assert status == "REJECTED"


def test_status_update_owner_only(client, make_business, applied):
    rival = make_business("rival@test.com", "Rival LLC")
    resp = _patch_status(client, rival["headers"], applied["application"]["id"], "REVIEWED")
    assert resp.status_code == 403


def test_status_update_missing_application(client, business):
    assert _patch_status(client, business["headers"], "missing", "REVIEWED").status_code == 404


def test_status_update_rejects_unknown_status(client, business, applied):
    resp = _patch_status(client, business["headers"], applied["application"]["id"], "HIRED")
    assert resp.status_code == 422


def test_worker_withdraws_application(client, worker, applied):
    url = f"/api/workers/applications/{applied['application']['id']}/withdraw"

    resp = client.post(url, headers=worker["headers"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "WITHDRAWN"

    again = client.post(url, headers=worker["headers"])
    assert again.status_code == 400


def test_withdraw_after_accept_rejected(client, business, worker, applied):
    _patch_status(client, business["headers"], applied["application"]["id"], "ACCEPTED")
    resp = client.post(f"/api/workers/applications/{applied['application']['id']}/withdraw",
                       headers=worker["headers"])
    assert resp.status_code == 400


def test_withdraw_someone_elses_application(client, make_worker, applied):
    other = make_worker("other@test.com", "Omar", "Diaz")
    resp = client.post(f"/api/workers/applications/{applied['application']['id']}/withdraw",
                       headers=other["headers"])
    assert resp.status_code == 404


def test_contract_completion(client, business, worker, applied):
    _patch_status(client, business["headers"], applied["application"]["id"], "ACCEPTED")
    contract = client.get("/api/business/contracts", headers=business["headers"]).json()["contracts"][0]

    resp = client.patch(f"/api/business/contracts/{contract['id']}", headers=business["headers"],
                        json={"status": "COMPLETED"})

    assert resp.status_code == 200
    assert resp.json()["completed_at"] is not None
    profile = client.get("/api/workers/profile", headers=worker["headers"]).json()
    assert profile["total_jobs_completed"] == 1
    notes = client.get("/api/notifications", headers=worker["headers"]).json()["notifications"]
    assert notes[0]["type"] == "CONTRACT_COMPLETED"

    reopen = client.patch(f"/api/business/contracts/{contract['id']}", headers=business["headers"],
                          json={"status": "ACTIVE"})
    assert reopen.status_code == 400


def test_contract_update_owner_only(client, business, make_business, applied):
    _patch_status(client, business["headers"], applied["application"]["id"], "ACCEPTED")
    contract_id = execute_raw_sql("SELECT id FROM contracts")[0]["id"]
    rival = make_business("rival@test.com", "Rival LLC")

    resp = client.patch(f"/api/business/contracts/{contract_id}", headers=rival["headers"],
                        json={"status": "CANCELLED"})

    assert resp.status_code == 403


def test_contract_lists(client, business, worker, applied):
    _patch_status(client, business["headers"], applied["application"]["id"], "ACCEPTED")

    mine = client.get("/api/workers/contracts", headers=worker["headers"]).json()
    theirs = client.get("/api/business/contracts", headers=business["headers"],
                        params={"status": "ACTIVE"}).json()

    assert mine["pagination"]["total"] == 1
    assert mine["contracts"][0]["business"]["company_name"] == "Acme Builders"
    assert theirs["contracts"][0]["worker"]["first_name"] == "Jane"
    assert theirs["contracts"][0]["job"]["id"] == applied["job"]["id"]

    completed = client.get("/api/business/contracts", headers=business["headers"],
                           params={"status": "COMPLETED"}).json()
    assert completed["contracts"] == []
