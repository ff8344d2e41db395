"""
Worker Routes

POST /workers/onboarding - Create/replace worker profile (skills, experience, languages, licenses)
GET /workers/profile - Get own profile
PUT /workers/profile - Update own profile
GET /workers/portfolio - List portfolio items
POST /workers/portfolio - Add portfolio item
GET /workers/portfolio/{item_id} - Get portfolio item
PUT /workers/portfolio/{item_id} - Replace portfolio item
DELETE /workers/portfolio/{item_id} - Delete portfolio item
GET /workers/applications - My applications
POST /workers/applications/{id}/withdraw - Withdraw an application
GET /workers/contracts - My contracts
GET /workers/saved-jobs - My saved jobs
GET /workers/{worker_id} - Public view of a worker profile
"""

import logging
import math

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import bindparam, text
from typing import List, Optional

from gigit.db.database import get_db_session, fetch_all, fetch_one, nest_columns, new_id, utcnow
from gigit.core.auth import get_current_user, get_current_worker
from gigit.services import worker_service
from gigit.services.application_service import withdraw_application
from gigit.services.job_service import JOB_SELECT, attach_job_details, find_unknown_skills, split_job_row
from gigit.schemas.schemas import (
    WorkerOnboardingRequest, WorkerProfileUpdate, WorkerProfileResponse,
    PortfolioItemCreate, PortfolioItemResponse,
    ApplicationStatus, ApplicationResponse, WorkerApplicationResponse,
    ContractStatus, WorkerContractResponse, WorkerContractListResponse,
    SavedJobResponse, JobResponse, Pagination, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workers", tags=["Workers"])


JOB_SUMMARY_COLUMNS = """
    j.id AS j_id, j.title AS j_title, j.status AS j_status, j.job_type AS j_job_type,
    j.payment_type AS j_payment_type, j.location_type AS j_location_type,
    j.budget_min AS j_budget_min, j.budget_max AS j_budget_max,
    j.job_location_city AS j_job_location_city, j.job_location_state AS j_job_location_state,
    j.start_date AS j_start_date, j.end_date AS j_end_date
"""

BUSINESS_SUMMARY_COLUMNS = """
    b.id AS b_id, b.company_name AS b_company_name, b.logo_url AS b_logo_url,
    b.location_city AS b_location_city, b.location_state AS b_location_state,
    b.verification_status AS b_verification_status
"""


# ============================================================
# ONBOARDING & PROFILE
# ============================================================

@router.post("/onboarding", response_model=WorkerProfileResponse)
async def worker_onboarding(data: WorkerOnboardingRequest, user: dict = Depends(get_current_user)):
    """
    Complete worker onboarding in one transaction.

    Skills are replaced when a non-empty list is sent; experiences, languages
    and licenses are replaced whenever the field is present.
    """
    if user["user_type"] not in (None, "WORKER"):
        raise HTTPException(status_code=403, detail="This account is not a worker account")

    fields = {col: getattr(data, col) for col in worker_service.PROFILE_COLUMNS}

    with get_db_session() as db:
        if data.skills:
            unknown = find_unknown_skills(db, [s.skill_id for s in data.skills])
            if unknown:
                raise HTTPException(status_code=400, detail=f"Unknown skill ids: {', '.join(unknown)}")

        worker_id = worker_service.upsert_profile(db, user["user_id"], fields)

        if data.skills:
            worker_service.replace_skills(db, worker_id, data.skills)
        if data.work_experiences is not None:
            worker_service.replace_experiences(db, worker_id, data.work_experiences)
        if data.languages is not None:
            worker_service.replace_languages(db, worker_id, data.languages)
        if data.licenses is not None:
            worker_service.replace_licenses(db, worker_id, data.licenses)

        db.execute(
            text("""
                UPDATE users SET user_type = 'WORKER', onboarding_completed = :done, name = :name,
                    updated_at = :now
                WHERE id = :id
            """),
            {"done": True, "name": f"{data.first_name} {data.last_name}", "now": utcnow(), "id": user["user_id"]}
        )
        profile = worker_service.load_worker_profile(db, worker_id)

    logger.info("Worker onboarding completed for user %s", user["user_id"])
    return WorkerProfileResponse(**profile)


@router.get("/profile", response_model=WorkerProfileResponse)
async def get_profile(worker: dict = Depends(get_current_worker)):
    """Get current worker's full profile."""
    with get_db_session() as db:
        profile = worker_service.load_worker_profile(db, worker["worker_id"])
    return WorkerProfileResponse(**profile)


@router.put("/profile", response_model=WorkerProfileResponse)
async def update_profile(data: WorkerProfileUpdate, worker: dict = Depends(get_current_worker)):
    """Update worker profile. Only provided fields are changed."""
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "availability_status" in updates:
        updates["availability_status"] = updates["availability_status"].value

    with get_db_session() as db:
        if updates:
            now = utcnow()
            set_clause = ", ".join(f"{k} = :{k}" for k in updates)
            db.execute(
                text(f"UPDATE worker_profiles SET {set_clause}, updated_at = :now WHERE id = :id"),
                {**updates, "now": now, "id": worker["worker_id"]}
            )

            if "first_name" in updates or "last_name" in updates:
                row = fetch_one(
                    db, "SELECT first_name, last_name FROM worker_profiles WHERE id = :id",
                    {"id": worker["worker_id"]}
                )
                db.execute(
                    text("UPDATE users SET name = :name, updated_at = :now WHERE id = :id"),
                    {"name": f"{row['first_name']} {row['last_name']}", "now": now, "id": worker["user_id"]}
                )

        profile = worker_service.load_worker_profile(db, worker["worker_id"])

    return WorkerProfileResponse(**profile)


# ============================================================
# PORTFOLIO
# ============================================================

@router.get("/portfolio", response_model=List[PortfolioItemResponse])
async def list_portfolio(worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        items = worker_service.load_portfolio(db, worker["worker_id"])
    return [PortfolioItemResponse(**item) for item in items]


@router.post("/portfolio", response_model=PortfolioItemResponse, status_code=201)
async def create_portfolio_item(data: PortfolioItemCreate, worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        item_id = new_id()
        db.execute(
            text("""
                INSERT INTO portfolio_items (id, worker_id, title, description, project_date, created_at)
                VALUES (:id, :wid, :title, :description, :project_date, :now)
            """),
            {
                "id": item_id, "wid": worker["worker_id"], "title": data.title,
                "description": data.description, "project_date": data.project_date, "now": utcnow()
            }
        )
        worker_service.replace_portfolio_images(db, item_id, data.images)
        item = worker_service.load_portfolio(db, worker["worker_id"], item_id)[0]

    return PortfolioItemResponse(**item)


@router.get("/portfolio/{item_id}", response_model=PortfolioItemResponse)
async def get_portfolio_item(item_id: str, worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        items = worker_service.load_portfolio(db, worker["worker_id"], item_id)
    if not items:
        raise HTTPException(status_code=404, detail="Portfolio item not found")
    return PortfolioItemResponse(**items[0])


@router.put("/portfolio/{item_id}", response_model=PortfolioItemResponse)
async def update_portfolio_item(item_id: str, data: PortfolioItemCreate, worker: dict = Depends(get_current_worker)):
    """Replace a portfolio item, including all of its images."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                UPDATE portfolio_items SET title = :title, description = :description,
                    project_date = :project_date
                WHERE id = :id AND worker_id = :wid
            """),
            {
                "title": data.title, "description": data.description, "project_date": data.project_date,
                "id": item_id, "wid": worker["worker_id"]
            }
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Portfolio item not found")

        worker_service.replace_portfolio_images(db, item_id, data.images)
        item = worker_service.load_portfolio(db, worker["worker_id"], item_id)[0]

    return PortfolioItemResponse(**item)


@router.delete("/portfolio/{item_id}", response_model=MessageResponse)
async def delete_portfolio_item(item_id: str, worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM portfolio_items WHERE id = :id AND worker_id = :wid"),
            {"id": item_id, "wid": worker["worker_id"]}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Portfolio item not found")

    return MessageResponse(message="Portfolio item deleted")


# ============================================================
# APPLICATIONS, CONTRACTS, SAVED JOBS
# ============================================================

@router.get("/applications", response_model=List[WorkerApplicationResponse])
async def my_applications(
    status: Optional[ApplicationStatus] = Query(None),
    worker: dict = Depends(get_current_worker)
):
    """Get all applications submitted by current worker."""
    sql = f"""
        SELECT a.id, a.job_post_id, a.worker_id, a.cover_letter, a.proposed_rate, a.status,
               a.applied_at, a.reviewed_at, a.updated_at,
               {JOB_SUMMARY_COLUMNS}, {BUSINESS_SUMMARY_COLUMNS}
        FROM job_applications a
        JOIN job_posts j ON j.id = a.job_post_id
        JOIN business_profiles b ON b.id = j.business_id
        WHERE a.worker_id = :wid
    """
    params = {"wid": worker["worker_id"]}
    if status:
        sql += " AND a.status = :status"
        params["status"] = status.value
    sql += " ORDER BY a.applied_at DESC"

    with get_db_session() as db:
        rows = fetch_all(db, sql, params)

    return [
        WorkerApplicationResponse(**nest_columns(r, {"j_": "job", "b_": "business"}))
        for r in rows
    ]


@router.post("/applications/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw(application_id: str, worker: dict = Depends(get_current_worker)):
    """Withdraw an application that has not been decided yet."""
    with get_db_session() as db:
        if not withdraw_application(db, application_id, worker["worker_id"]):
            raise HTTPException(status_code=404, detail="Application not found")
        application = fetch_one(
            db,
            """
            SELECT id, job_post_id, worker_id, cover_letter, proposed_rate, status,
                   applied_at, reviewed_at, updated_at
            FROM job_applications WHERE id = :id
            """,
            {"id": application_id}
        )

    logger.info("Worker %s withdrew application %s", worker["worker_id"], application_id)
    return ApplicationResponse(**application)


@router.get("/contracts", response_model=WorkerContractListResponse)
async def my_contracts(
    status: Optional[ContractStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    worker: dict = Depends(get_current_worker)
):
    where = " WHERE c.worker_id = :wid"
    params = {"wid": worker["worker_id"]}
    if status:
        where += " AND c.status = :status"
        params["status"] = status.value

    with get_db_session() as db:
        total = db.execute(text("SELECT COUNT(*) FROM contracts c" + where), params).scalar() or 0
        rows = fetch_all(
            db,
            f"""
            SELECT c.id, c.job_post_id, c.worker_id, c.business_id, c.contract_type, c.status,
                   c.start_date, c.end_date, c.agreed_rate, c.completed_at, c.created_at,
                   {JOB_SUMMARY_COLUMNS}, {BUSINESS_SUMMARY_COLUMNS}
            FROM contracts c
            JOIN job_posts j ON j.id = c.job_post_id
            JOIN business_profiles b ON b.id = c.business_id
            {where}
            ORDER BY c.created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": (page - 1) * limit}
        )

    return WorkerContractListResponse(
        contracts=[WorkerContractResponse(**nest_columns(r, {"j_": "job", "b_": "business"})) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
    )


@router.get("/saved-jobs", response_model=List[SavedJobResponse])
async def saved_jobs(worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        saved = fetch_all(
            db,
            """
            SELECT id, job_post_id, created_at FROM saved_jobs
            WHERE worker_id = :wid ORDER BY created_at DESC
            """,
            {"wid": worker["worker_id"]}
        )
        jobs = {}
        if saved:
            rows = db.execute(
                text(JOB_SELECT + " WHERE j.id IN :ids").bindparams(bindparam("ids", expanding=True)),
                {"ids": [s["job_post_id"] for s in saved]}
            ).mappings().all()
            for job in attach_job_details(db, [split_job_row(dict(r)) for r in rows]):
                jobs[job["id"]] = job

    return [
        SavedJobResponse(
            id=s["id"], job_post_id=s["job_post_id"], created_at=s["created_at"],
            job=JobResponse(**jobs[s["job_post_id"]]) if s["job_post_id"] in jobs else None
        )
        for s in saved
    ]


@router.get("/{worker_id}", response_model=WorkerProfileResponse)
async def view_worker(worker_id: str, user: dict = Depends(get_current_user)):
    """View another worker's profile. License numbers and documents are hidden."""
    with get_db_session() as db:
        profile = worker_service.load_worker_profile(db, worker_id, include_private=False)
    if not profile:
        raise HTTPException(status_code=404, detail="Worker not found")
    return WorkerProfileResponse(**profile)
