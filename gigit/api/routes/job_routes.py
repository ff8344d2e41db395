"""
Job Routes

GET /jobs - List active jobs with filters, sorting and pagination (public)
POST /jobs - Create job posting (business only)
GET /jobs/{job_id} - Get job details (public, worker-aware when logged in)
PUT /jobs/{job_id} - Update job (owner only)
DELETE /jobs/{job_id} - Delete job (owner only)
POST /jobs/{job_id}/apply - Apply to job (worker only)
POST /jobs/{job_id}/save - Save job (worker only)
DELETE /jobs/{job_id}/save - Unsave job (worker only)
"""

import logging
import math

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import bindparam, text
from typing import Optional

from gigit.db.database import LIKE_ESCAPE, contains_pattern, get_db_session, fetch_one, new_id, utcnow
from gigit.core.auth import get_current_worker, get_current_business, get_optional_user
from gigit.services.job_service import (
    JOB_SELECT, UPDATABLE_JOB_COLUMNS, attach_job_details, db_value, find_unknown_skills,
    load_job, replace_job_skills, split_job_row
)
from gigit.services.notification_service import create_notification
from gigit.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobDetailResponse, JobListResponse, Pagination,
    JobType, LocationType, PaymentType, Urgency, JobSort,
    ApplicationCreate, ApplicationResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


SORT_ORDERS = {
    JobSort.newest: "j.published_at DESC NULLS LAST, j.created_at DESC",
    JobSort.oldest: "j.published_at ASC NULLS LAST, j.created_at ASC",
    JobSort.budget_high: "j.budget_max DESC NULLS LAST, j.published_at DESC",
    JobSort.budget_low: "j.budget_min ASC NULLS LAST, j.published_at DESC",
    JobSort.urgency: """
        CASE j.urgency WHEN 'URGENT' THEN 0 WHEN 'HIGH' THEN 1 WHEN 'MEDIUM' THEN 2 ELSE 3 END,
        j.published_at DESC
    """,
}

APPLICATION_COLUMNS = """
    id, job_post_id, worker_id, cover_letter, proposed_rate, status, applied_at, reviewed_at, updated_at
"""


def _get_owned_job(db, job_id: str, business_id: str) -> dict:
    job = fetch_one(db, "SELECT id, business_id, status FROM job_posts WHERE id = :id", {"id": job_id})
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job["business_id"] != business_id:
        raise HTTPException(status_code=403, detail="You do not own this job")
    return job


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title and description"),
    skills: Optional[str] = Query(None, description="Comma-separated skill ids, matches any"),
    job_type: Optional[JobType] = Query(None),
    location_type: Optional[LocationType] = Query(None),
    payment_type: Optional[PaymentType] = Query(None),
    urgency: Optional[Urgency] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    min_budget: Optional[float] = Query(None, ge=0),
    max_budget: Optional[float] = Query(None, ge=0),
    sort_by: JobSort = Query(JobSort.newest)
):
    """List active job postings with filters and pagination."""
    where = " WHERE j.status = 'ACTIVE'"
    params = {}
    skill_ids = [s.strip() for s in skills.split(",") if s.strip()] if skills else []

    if search:
        where += (
            " AND (LOWER(j.title) LIKE LOWER(:search)" + LIKE_ESCAPE
            + " OR LOWER(j.description) LIKE LOWER(:search)" + LIKE_ESCAPE + ")"
        )
        params["search"] = contains_pattern(search)
    if skill_ids:
        where += """ AND EXISTS (
            SELECT 1 FROM job_post_skills jps
            WHERE jps.job_post_id = j.id AND jps.skill_id IN :skill_ids
        )"""
        params["skill_ids"] = skill_ids
    if job_type:
        where += " AND j.job_type = :job_type"
        params["job_type"] = job_type.value
    if location_type:
        where += " AND j.location_type = :location_type"
        params["location_type"] = location_type.value
    if payment_type:
        where += " AND j.payment_type = :payment_type"
        params["payment_type"] = payment_type.value
    if urgency:
        where += " AND j.urgency = :urgency"
        params["urgency"] = urgency.value
    if city:
        where += " AND LOWER(j.job_location_city) LIKE LOWER(:city)" + LIKE_ESCAPE
        params["city"] = contains_pattern(city)
    if state:
        where += " AND LOWER(j.job_location_state) LIKE LOWER(:state)" + LIKE_ESCAPE
        params["state"] = contains_pattern(state)
    if min_budget is not None:
        where += " AND j.budget_max >= :min_budget"
        params["min_budget"] = min_budget
    if max_budget is not None:
        where += " AND j.budget_min <= :max_budget"
        params["max_budget"] = max_budget

    count_query = text(
        "SELECT COUNT(*) FROM job_posts j JOIN business_profiles b ON b.id = j.business_id" + where
    )
    list_query = text(JOB_SELECT + where + f" ORDER BY {SORT_ORDERS[sort_by]} LIMIT :limit OFFSET :offset")
    if skill_ids:
        count_query = count_query.bindparams(bindparam("skill_ids", expanding=True))
        list_query = list_query.bindparams(bindparam("skill_ids", expanding=True))

    with get_db_session() as db:
        total = db.execute(count_query, params).scalar() or 0
        rows = db.execute(
            list_query, {**params, "limit": limit, "offset": (page - 1) * limit}
        ).mappings().all()
        jobs = attach_job_details(db, [split_job_row(dict(r)) for r in rows])

    return JobListResponse(
        jobs=[JobResponse(**j) for j in jobs],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
    )


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, business: dict = Depends(get_current_business)):
    """Create a new job posting. Saved as DRAFT unless publish=true."""
    with get_db_session() as db:
        unknown = find_unknown_skills(db, job.required_skills)
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown skill ids: {', '.join(unknown)}")

        job_id = new_id()
        now = utcnow()
        db.execute(
            text("""
                INSERT INTO job_posts (id, business_id, title, description, job_type,
                    number_of_workers_needed, budget_min, budget_max, payment_type, location_type,
                    job_location_city, job_location_state, start_date, end_date, duration_days,
                    status, urgency, published_at, expires_at, created_at, updated_at)
                VALUES (:id, :business_id, :title, :description, :job_type,
                    :workers, :budget_min, :budget_max, :payment_type, :location_type,
                    :city, :state, :start_date, :end_date, :duration_days,
                    :status, :urgency, :published_at, :expires_at, :now, :now)
            """),
            {
                "id": job_id, "business_id": business["business_id"], "title": job.title,
                "description": job.description, "job_type": job.job_type.value,
                "workers": job.number_of_workers_needed, "budget_min": job.budget_min,
                "budget_max": job.budget_max, "payment_type": job.payment_type.value,
                "location_type": job.location_type.value, "city": job.job_location_city,
                "state": job.job_location_state, "start_date": job.start_date,
                "end_date": job.end_date, "duration_days": job.duration_days,
                "status": "ACTIVE" if job.publish else "DRAFT", "urgency": job.urgency.value,
                "published_at": now if job.publish else None, "expires_at": job.expires_at, "now": now
            }
        )
        replace_job_skills(db, job_id, job.required_skills)
        created = load_job(db, job_id)

    logger.info("Business %s created job %s (%s)", business["business_id"], job_id, created["status"])
    return JobResponse(**created)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """Get job details. Logged-in workers also see their own application state."""
    with get_db_session() as db:
        job = load_job(db, job_id)
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")

        if user and user["user_type"] == "WORKER":
            worker = fetch_one(db, "SELECT id FROM worker_profiles WHERE user_id = :u", {"u": user["user_id"]})
            if worker:
                application = fetch_one(
                    db,
                    f"SELECT {APPLICATION_COLUMNS} FROM job_applications WHERE job_post_id = :jid AND worker_id = :wid",
                    {"jid": job_id, "wid": worker["id"]}
                )
                saved = db.execute(
                    text("SELECT 1 FROM saved_jobs WHERE job_post_id = :jid AND worker_id = :wid"),
                    {"jid": job_id, "wid": worker["id"]}
                ).fetchone()
                job["has_applied"] = application is not None
                job["application"] = application
                job["is_saved"] = saved is not None

    return JobDetailResponse(**job)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: str, data: JobUpdate, business: dict = Depends(get_current_business)):
    """Update job posting. Only the owning business can update."""
    updates = {
        k: db_value(v) for k, v in data.model_dump(exclude_unset=True).items()
        if k in UPDATABLE_JOB_COLUMNS
    }

    with get_db_session() as db:
        current = _get_owned_job(db, job_id, business["business_id"])

        if data.required_skills is not None:
            unknown = find_unknown_skills(db, data.required_skills)
            if unknown:
                raise HTTPException(status_code=400, detail=f"Unknown skill ids: {', '.join(unknown)}")
            replace_job_skills(db, job_id, data.required_skills)

        existing = fetch_one(db, "SELECT budget_min, budget_max FROM job_posts WHERE id = :id", {"id": job_id})
        budget_min = updates.get("budget_min", existing["budget_min"])
        budget_max = updates.get("budget_max", existing["budget_max"])
        if budget_min is not None and budget_max is not None and budget_min > budget_max:
            raise HTTPException(status_code=422, detail="budget_min cannot be greater than budget_max")

        now = utcnow()
        set_clause = [f"{col} = :{col}" for col in updates]
        if updates.get("status") == "ACTIVE" and current["status"] != "ACTIVE":
            set_clause.append("published_at = COALESCE(published_at, :now)")
        set_clause.append("updated_at = :now")

        db.execute(
            text(f"UPDATE job_posts SET {', '.join(set_clause)} WHERE id = :id"),
            {**updates, "now": now, "id": job_id}
        )
        updated = load_job(db, job_id)

    return JobResponse(**updated)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, business: dict = Depends(get_current_business)):
    """Delete job posting with its applications, contracts and saved entries."""
    with get_db_session() as db:
        _get_owned_job(db, job_id, business["business_id"])
        db.execute(text("DELETE FROM job_posts WHERE id = :id"), {"id": job_id})

    logger.info("Business %s deleted job %s", business["business_id"], job_id)
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(
    job_id: str,
    data: Optional[ApplicationCreate] = None,
    worker: dict = Depends(get_current_worker)
):
    """Apply to an active job. One application per worker per job."""
    data = data or ApplicationCreate()

    with get_db_session() as db:
        job = fetch_one(
            db,
            """
            SELECT j.id, j.title, j.status, b.user_id AS business_user_id
            FROM job_posts j JOIN business_profiles b ON b.id = j.business_id
            WHERE j.id = :id
            """,
            {"id": job_id}
        )
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        if job["status"] != "ACTIVE":
            raise HTTPException(status_code=400, detail="This job is not accepting applications")

        existing = db.execute(
            text("SELECT id FROM job_applications WHERE job_post_id = :jid AND worker_id = :wid"),
            {"jid": job_id, "wid": worker["worker_id"]}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=400, detail="You have already applied to this job")

        application_id = new_id()
        now = utcnow()
        db.execute(
            text("""
                INSERT INTO job_applications (id, job_post_id, worker_id, cover_letter, proposed_rate,
                    status, applied_at, updated_at)
                VALUES (:id, :jid, :wid, :cover_letter, :proposed_rate, 'PENDING', :now, :now)
            """),
            {
                "id": application_id, "jid": job_id, "wid": worker["worker_id"],
                "cover_letter": data.cover_letter, "proposed_rate": data.proposed_rate, "now": now
            }
        )

        create_notification(
            db,
            job["business_user_id"],
            "JOB_APPLICATION",
            "New Application",
            f'{worker["worker_name"]} applied to "{job["title"]}".',
            f"/business/jobs/{job_id}/applications",
        )

        application = fetch_one(
            db, f"SELECT {APPLICATION_COLUMNS} FROM job_applications WHERE id = :id", {"id": application_id}
        )

    logger.info("Worker %s applied to job %s", worker["worker_id"], job_id)
    return ApplicationResponse(**application)


@router.post("/{job_id}/save", response_model=MessageResponse, status_code=201)
async def save_job(job_id: str, worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        if not db.execute(text("SELECT 1 FROM job_posts WHERE id = :id"), {"id": job_id}).fetchone():
            raise HTTPException(status_code=404, detail="Job not found")

        existing = db.execute(
            text("SELECT 1 FROM saved_jobs WHERE job_post_id = :jid AND worker_id = :wid"),
            {"jid": job_id, "wid": worker["worker_id"]}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=400, detail="Job already saved")

        db.execute(
            text("""
                INSERT INTO saved_jobs (id, worker_id, job_post_id, created_at)
                VALUES (:id, :wid, :jid, :now)
            """),
            {"id": new_id(), "wid": worker["worker_id"], "jid": job_id, "now": utcnow()}
        )

    return MessageResponse(message="Job saved")


@router.delete("/{job_id}/save", response_model=MessageResponse)
async def unsave_job(job_id: str, worker: dict = Depends(get_current_worker)):
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM saved_jobs WHERE job_post_id = :jid AND worker_id = :wid"),
            {"jid": job_id, "wid": worker["worker_id"]}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Saved job not found")

    return MessageResponse(message="Job removed from saved jobs")
