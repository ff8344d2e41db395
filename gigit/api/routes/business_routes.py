"""
Business Routes

POST /business/onboarding - Create/update business profile
GET /business/jobs - Get business's jobs
GET /business/jobs/{job_id}/applications - Applicants for a job
PATCH /business/applications/{id} - Move an application through the hiring flow
GET /business/contracts - Contracts with hired workers
PATCH /business/contracts/{id} - Update contract status
GET /business/dashboard - Hiring stats and recent activity
"""

import logging
import math

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from gigit.db.database import get_db_session, fetch_all, fetch_one, nest_columns, new_id, utcnow
from gigit.core.auth import get_current_user, get_current_business
from gigit.services import worker_service
from gigit.services.application_service import update_application_status, update_contract_status
from gigit.services.job_service import JOB_SELECT, attach_job_details, split_job_row
from gigit.schemas.schemas import (
    BusinessOnboardingRequest, BusinessDetail, JobStatus, JobResponse,
    ApplicationStatusUpdate, ApplicationResponse, JobApplicantResponse,
    ContractStatus, ContractStatusUpdate, ContractResponse,
    BusinessContractResponse, BusinessContractListResponse,
    DashboardResponse, DashboardStats, RecentJob, RecentApplication, Pagination
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business", tags=["Business"])


BUSINESS_DETAIL_COLUMNS = """
    id, company_name, logo_url, location_city, location_state, location_country,
    verification_status, description, industry, company_size, website
"""

APPLICATION_COLUMNS = """
    a.id, a.job_post_id, a.worker_id, a.cover_letter, a.proposed_rate, a.status,
    a.applied_at, a.reviewed_at, a.updated_at
"""

CONTRACT_COLUMNS = """
    c.id, c.job_post_id, c.worker_id, c.business_id, c.contract_type, c.status,
    c.start_date, c.end_date, c.agreed_rate, c.completed_at, c.created_at
"""


@router.post("/onboarding", response_model=BusinessDetail)
async def business_onboarding(data: BusinessOnboardingRequest, user: dict = Depends(get_current_user)):
    """Create or update the business profile and finish onboarding."""
    if user["user_type"] not in (None, "BUSINESS"):
        raise HTTPException(status_code=403, detail="This account is not a business account")

    fields = {
        "company_name": data.company_name,
        "company_registration_number": data.company_registration_number,
        "phone": data.phone,
        "industry": data.industry,
        "company_size": data.company_size.value if data.company_size else None,
        "website": data.website,
        "logo_url": data.logo_url,
        "description": data.description,
        "location_city": data.location_city,
        "location_state": data.location_state,
        "location_country": data.location_country or "USA",
    }

    with get_db_session() as db:
        now = utcnow()
        existing = db.execute(
            text("SELECT id FROM business_profiles WHERE user_id = :u"), {"u": user["user_id"]}
        ).fetchone()

        if existing:
            business_id = existing[0]
            set_clause = ", ".join(f"{col} = :{col}" for col in fields)
            db.execute(
                text(f"UPDATE business_profiles SET {set_clause}, updated_at = :now WHERE id = :id"),
                {**fields, "now": now, "id": business_id}
            )
        else:
            business_id = new_id()
            db.execute(
                text(f"""
                    INSERT INTO business_profiles (id, user_id, {', '.join(fields)}, created_at, updated_at)
                    VALUES (:id, :user_id, {', '.join(':' + col for col in fields)}, :now, :now)
                """),
                {**fields, "id": business_id, "user_id": user["user_id"], "now": now}
            )

        db.execute(
            text("""
                UPDATE users SET user_type = 'BUSINESS', onboarding_completed = :done, name = :name,
                    updated_at = :now
                WHERE id = :id
            """),
            {"done": True, "name": data.company_name, "now": now, "id": user["user_id"]}
        )
        profile = fetch_one(
            db, f"SELECT {BUSINESS_DETAIL_COLUMNS} FROM business_profiles WHERE id = :id", {"id": business_id}
        )

    logger.info("Business onboarding completed for user %s", user["user_id"])
    return BusinessDetail(**profile)


@router.get("/jobs", response_model=List[JobResponse])
async def my_jobs(
    status: Optional[JobStatus] = Query(None),
    business: dict = Depends(get_current_business)
):
    """Get all jobs posted by current business, newest first."""
    sql = JOB_SELECT + " WHERE j.business_id = :bid"
    params = {"bid": business["business_id"]}
    if status:
        sql += " AND j.status = :status"
        params["status"] = status.value
    sql += " ORDER BY j.created_at DESC"

    with get_db_session() as db:
        rows = db.execute(text(sql), params).mappings().all()
        jobs = attach_job_details(db, [split_job_row(dict(r)) for r in rows])

    return [JobResponse(**j) for j in jobs]


@router.get("/jobs/{job_id}/applications", response_model=List[JobApplicantResponse])
async def job_applications(job_id: str, business: dict = Depends(get_current_business)):
    """Applicants for one of the business's jobs, with a profile snapshot each."""
    with get_db_session() as db:
        job = fetch_one(db, "SELECT id, business_id FROM job_posts WHERE id = :id", {"id": job_id})
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        if job["business_id"] != business["business_id"]:
            raise HTTPException(status_code=403, detail="You do not own this job")

        rows = fetch_all(
            db,
            f"""
            SELECT {APPLICATION_COLUMNS},
                   w.id AS w_id, w.user_id AS w_user_id, w.first_name AS w_first_name,
                   w.last_name AS w_last_name, w.headline AS w_headline, u.email AS w_email,
                   u.image AS w_image, w.hourly_rate AS w_hourly_rate,
                   w.years_of_experience AS w_years_of_experience, w.location_city AS w_location_city,
                   w.location_state AS w_location_state, w.rating_average AS w_rating_average
            FROM job_applications a
            JOIN worker_profiles w ON w.id = a.worker_id
            JOIN users u ON u.id = w.user_id
            WHERE a.job_post_id = :jid
            ORDER BY a.applied_at DESC
            """,
            {"jid": job_id}
        )

        applicants = []
        for row in rows:
            applicant = nest_columns(row, {"w_": "worker"})
            worker_id = applicant["worker"]["id"]
            applicant["worker"]["skills"] = worker_service.load_skills(db, worker_id)
            applicant["worker"]["work_experiences"] = worker_service.load_experiences(db, worker_id, limit=3)
            applicant["worker"]["licenses"] = worker_service.load_licenses(
                db, worker_id, limit=5, include_private=False
            )
            applicants.append(applicant)

    return [JobApplicantResponse(**a) for a in applicants]


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def change_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    business: dict = Depends(get_current_business)
):
    """
    Review, shortlist, reject or accept an application.

    Accepting creates the contract. The status change, contract and worker
    notification commit together.
    """
    with get_db_session() as db:
        application = fetch_one(
            db,
            """
            SELECT a.id, a.status, a.job_post_id, a.worker_id, a.proposed_rate,
                   j.business_id, j.job_type, j.budget_min, j.start_date, j.end_date,
                   j.title AS job_title, b.company_name, w.user_id AS worker_user_id
            FROM job_applications a
            JOIN job_posts j ON j.id = a.job_post_id
            JOIN business_profiles b ON b.id = j.business_id
            JOIN worker_profiles w ON w.id = a.worker_id
            WHERE a.id = :id
            """,
            {"id": application_id}
        )
        if not application:
            raise HTTPException(status_code=404, detail="Application not found")
        if application["business_id"] != business["business_id"]:
            raise HTTPException(status_code=403, detail="You do not own this application's job")

        contract_id = update_application_status(db, application, data.status.value)

        updated = fetch_one(
            db, f"SELECT {APPLICATION_COLUMNS} FROM job_applications a WHERE a.id = :id", {"id": application_id}
        )

    logger.info(
        "Application %s moved %s -> %s%s", application_id, application["status"], data.status.value,
        f" (contract {contract_id})" if contract_id else ""
    )
    return ApplicationResponse(**updated)


@router.get("/contracts", response_model=BusinessContractListResponse)
async def my_contracts(
    status: Optional[ContractStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    business: dict = Depends(get_current_business)
):
    where = " WHERE c.business_id = :bid"
    params = {"bid": business["business_id"]}
    if status:
        where += " AND c.status = :status"
        params["status"] = status.value

    with get_db_session() as db:
        total = db.execute(text("SELECT COUNT(*) FROM contracts c" + where), params).scalar() or 0
        rows = fetch_all(
            db,
            f"""
            SELECT {CONTRACT_COLUMNS},
                   j.id AS j_id, j.title AS j_title, j.status AS j_status, j.job_type AS j_job_type,
                   j.payment_type AS j_payment_type, j.location_type AS j_location_type,
                   j.budget_min AS j_budget_min, j.budget_max AS j_budget_max,
                   j.job_location_city AS j_job_location_city, j.job_location_state AS j_job_location_state,
                   j.start_date AS j_start_date, j.end_date AS j_end_date,
                   w.id AS w_id, w.user_id AS w_user_id, w.first_name AS w_first_name,
                   w.last_name AS w_last_name, w.headline AS w_headline
            FROM contracts c
            JOIN job_posts j ON j.id = c.job_post_id
            JOIN worker_profiles w ON w.id = c.worker_id
            {where}
            ORDER BY c.created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": (page - 1) * limit}
        )

    return BusinessContractListResponse(
        contracts=[BusinessContractResponse(**nest_columns(r, {"j_": "job", "w_": "worker"})) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
    )


@router.patch("/contracts/{contract_id}", response_model=ContractResponse)
async def change_contract_status(
    contract_id: str,
    data: ContractStatusUpdate,
    business: dict = Depends(get_current_business)
):
    with get_db_session() as db:
        contract = fetch_one(
            db,
            """
            SELECT c.id, c.status, c.business_id, c.worker_id, w.user_id AS worker_user_id,
                   j.title AS job_title
            FROM contracts c
            JOIN worker_profiles w ON w.id = c.worker_id
            JOIN job_posts j ON j.id = c.job_post_id
            WHERE c.id = :id
            """,
            {"id": contract_id}
        )
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        if contract["business_id"] != business["business_id"]:
            raise HTTPException(status_code=403, detail="You do not own this contract")

        update_contract_status(db, contract, data.status.value)
        updated = fetch_one(db, f"SELECT {CONTRACT_COLUMNS} FROM contracts c WHERE c.id = :id", {"id": contract_id})

    logger.info("Contract %s moved %s -> %s", contract_id, contract["status"], data.status.value)
    return ContractResponse(**updated)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(business: dict = Depends(get_current_business)):
    """Hiring stats plus the latest jobs and applications."""
    params = {"bid": business["business_id"]}

    with get_db_session() as db:
        stats = fetch_one(
            db,
            """
            SELECT
                (SELECT COUNT(*) FROM job_posts WHERE business_id = :bid) AS total_jobs,
                (SELECT COUNT(*) FROM job_posts WHERE business_id = :bid AND status = 'ACTIVE') AS active_jobs,
                (SELECT COUNT(*) FROM job_applications a JOIN job_posts j ON j.id = a.job_post_id
                    WHERE j.business_id = :bid) AS total_applications,
                (SELECT COUNT(*) FROM job_applications a JOIN job_posts j ON j.id = a.job_post_id
                    WHERE j.business_id = :bid AND a.status = 'PENDING') AS pending_applications,
                (SELECT COUNT(*) FROM contracts WHERE business_id = :bid) AS total_contracts,
                (SELECT COUNT(*) FROM contracts WHERE business_id = :bid AND status = 'ACTIVE') AS active_contracts
            """,
            params
        )

        recent_jobs = fetch_all(
            db,
            """
            SELECT j.id, j.title, j.status, j.published_at,
                   (SELECT COUNT(*) FROM job_applications a WHERE a.job_post_id = j.id) AS application_count
            FROM job_posts j
            WHERE j.business_id = :bid
            ORDER BY j.created_at DESC
            LIMIT 5
            """,
            params
        )

        recent_applications = fetch_all(
            db,
            """
            SELECT a.id, a.status, a.applied_at, w.first_name AS worker_first_name,
                   w.last_name AS worker_last_name, j.id AS job_post_id, j.title AS job_title
            FROM job_applications a
            JOIN job_posts j ON j.id = a.job_post_id
            JOIN worker_profiles w ON w.id = a.worker_id
            WHERE j.business_id = :bid
            ORDER BY a.applied_at DESC
            LIMIT 5
            """,
            params
        )

    return DashboardResponse(
        stats=DashboardStats(**stats),
        recent_jobs=[RecentJob(**r) for r in recent_jobs],
        recent_applications=[RecentApplication(**r) for r in recent_applications]
    )
