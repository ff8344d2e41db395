"""
Application Service - hiring lifecycle for job applications and contracts.

Status changes are validated against an explicit transition table. Accepting
an application creates the contract in the same unit of work as the status
update and the worker notification; a second accept never creates a second
contract because (job_post_id, worker_id) is unique on contracts.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from gigit.core.exceptions import InvalidStatusTransition
from gigit.db.database import fetch_one, new_id, utcnow
from gigit.services.notification_service import create_notification

logger = logging.getLogger(__name__)


APPLICATION_TRANSITIONS = {
    "PENDING": {"REVIEWED", "SHORTLISTED", "REJECTED", "ACCEPTED"},
    "REVIEWED": {"SHORTLISTED", "REJECTED", "ACCEPTED"},
    "SHORTLISTED": {"REJECTED", "ACCEPTED"},
    "ACCEPTED": set(),
    "REJECTED": set(),
    "WITHDRAWN": set(),
}

WITHDRAWABLE_STATUSES = {"PENDING", "REVIEWED", "SHORTLISTED"}

CONTRACT_TRANSITIONS = {
    "PENDING": {"ACTIVE", "COMPLETED", "CANCELLED", "DISPUTED"},
    "ACTIVE": {"ACTIVE", "COMPLETED", "CANCELLED", "DISPUTED"},
    "COMPLETED": set(),
    "CANCELLED": set(),
    "DISPUTED": set(),
}

# New status -> (notification type, title)
STATUS_NOTIFICATIONS = {
    "SHORTLISTED": ("JOB_APPLICATION", "Application Shortlisted"),
    "ACCEPTED": ("JOB_ACCEPTED", "Application Accepted"),
    "REJECTED": ("JOB_REJECTED", "Application Update"),
    "REVIEWED": ("JOB_APPLICATION", "Application Update"),
}


def check_application_transition(current: str, requested: str) -> None:
    if requested not in APPLICATION_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition("application", current, requested)


def check_contract_transition(current: str, requested: str) -> None:
    if requested not in CONTRACT_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition("contract", current, requested)


def _status_message(status: str, job_title: str, company_name: str) -> str:
    if status == "ACCEPTED":
        return f'Congratulations! {company_name} accepted your application for "{job_title}".'
    if status == "SHORTLISTED":
        return f'{company_name} shortlisted your application for "{job_title}".'
    if status == "REJECTED":
        return f'{company_name} decided not to move forward with your application for "{job_title}".'
    return f'{company_name} reviewed your application for "{job_title}".'


def ensure_contract(db: Session, application: dict) -> str:
    """
    Return the contract id for the application's (job, worker), creating an
    ACTIVE contract when none exists yet.

    `application` must carry job_post_id, worker_id, business_id, job_type,
    proposed_rate, budget_min, start_date and end_date.
    """
    existing = db.execute(
        text("SELECT id FROM contracts WHERE job_post_id = :jid AND worker_id = :wid"),
        {"jid": application["job_post_id"], "wid": application["worker_id"]}
    ).fetchone()
    if existing:
        return existing[0]

    if application["proposed_rate"] is not None:
        agreed_rate = application["proposed_rate"]
    elif application["budget_min"] is not None:
        agreed_rate = application["budget_min"]
    else:
        agreed_rate = 0

    contract_id = new_id()
    now = utcnow()
    db.execute(
        text("""
            INSERT INTO contracts (id, job_post_id, worker_id, business_id, contract_type, status,
                start_date, end_date, agreed_rate, created_at, updated_at)
            VALUES (:id, :jid, :wid, :bid, :contract_type, 'ACTIVE',
                :start_date, :end_date, :agreed_rate, :now, :now)
        """),
        {
            "id": contract_id, "jid": application["job_post_id"], "wid": application["worker_id"],
            "bid": application["business_id"],
            "contract_type": "BULK_MEMBER" if application["job_type"] == "BULK" else "INDIVIDUAL",
            "start_date": application["start_date"] or now, "end_date": application["end_date"],
            "agreed_rate": agreed_rate, "now": now
        }
    )
    logger.info("Contract %s created for job %s, worker %s",
                contract_id, application["job_post_id"], application["worker_id"])
    return contract_id


def update_application_status(db: Session, application: dict, new_status: str) -> Optional[str]:
    """
    Move an application to new_status.

    `application` is the joined row loaded by the route (application, job and
    business columns plus the worker's user_id). Returns the contract id when
    the application was accepted, else None.
    """
    check_application_transition(application["status"], new_status)

    now = utcnow()
    db.execute(
        text("""
            UPDATE job_applications SET status = :status, reviewed_at = :now, updated_at = :now
            WHERE id = :id
        """),
        {"status": new_status, "now": now, "id": application["id"]}
    )

    contract_id = None
    if new_status == "ACCEPTED":
        contract_id = ensure_contract(db, application)

    notification_type, title = STATUS_NOTIFICATIONS[new_status]
    create_notification(
        db,
        application["worker_user_id"],
        notification_type,
        title,
        _status_message(new_status, application["job_title"], application["company_name"]),
        "/applications",
    )
    return contract_id


def withdraw_application(db: Session, application_id: str, worker_id: str) -> Optional[dict]:
    """Withdraw the worker's own application. Returns None when it is not theirs."""
    application = fetch_one(
        db,
        "SELECT id, status FROM job_applications WHERE id = :id AND worker_id = :wid",
        {"id": application_id, "wid": worker_id}
    )
    if not application:
        return None

    if application["status"] not in WITHDRAWABLE_STATUSES:
        raise InvalidStatusTransition("application", application["status"], "WITHDRAWN")

    db.execute(
        text("UPDATE job_applications SET status = 'WITHDRAWN', updated_at = :now WHERE id = :id"),
        {"now": utcnow(), "id": application_id}
    )
    application["status"] = "WITHDRAWN"
    return application


def update_contract_status(db: Session, contract: dict, new_status: str) -> None:
    """
    Move a contract to new_status. Completing a contract stamps completed_at,
    bumps the worker's completed-jobs counter and notifies the worker.

    `contract` carries id, status, worker_id, worker_user_id and job_title.
    """
    check_contract_transition(contract["status"], new_status)

    now = utcnow()
    completed_at = now if new_status == "COMPLETED" else None
    db.execute(
        text("""
            UPDATE contracts SET status = :status, completed_at = COALESCE(:completed_at, completed_at),
                updated_at = :now
            WHERE id = :id
        """),
        {"status": new_status, "completed_at": completed_at, "now": now, "id": contract["id"]}
    )

    if new_status == "COMPLETED":
        db.execute(
            text("""
                UPDATE worker_profiles SET total_jobs_completed = total_jobs_completed + 1, updated_at = :now
                WHERE id = :wid
            """),
            {"now": now, "wid": contract["worker_id"]}
        )
        create_notification(
            db,
            contract["worker_user_id"],
            "CONTRACT_COMPLETED",
            "Contract Completed",
            f'Your contract for "{contract["job_title"]}" has been marked as completed.',
            "/contracts",
        )
