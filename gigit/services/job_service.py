"""
Job Service - shared queries for job posts.

Job rows are selected together with their business (columns prefixed with
"b_") and then decorated with required skills and application counts in two
batched queries, so listing N jobs costs three round trips instead of 2N+1.
"""

from enum import Enum
from typing import Iterable, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session


JOB_SELECT = """
    SELECT j.id, j.business_id, j.title, j.description, j.job_type, j.number_of_workers_needed,
           j.budget_min, j.budget_max, j.payment_type, j.location_type, j.job_location_city,
           j.job_location_state, j.start_date, j.end_date, j.duration_days, j.status, j.urgency,
           j.published_at, j.expires_at, j.created_at, j.updated_at,
           b.id AS b_id, b.company_name AS b_company_name, b.logo_url AS b_logo_url,
           b.location_city AS b_location_city, b.location_state AS b_location_state,
           b.location_country AS b_location_country, b.verification_status AS b_verification_status,
           b.description AS b_description, b.industry AS b_industry,
           b.company_size AS b_company_size, b.website AS b_website
    FROM job_posts j
    JOIN business_profiles b ON b.id = j.business_id
"""

# Columns a business may change through PUT /jobs/{id}
UPDATABLE_JOB_COLUMNS = (
    "title", "description", "job_type", "number_of_workers_needed", "budget_min", "budget_max",
    "payment_type", "location_type", "job_location_city", "job_location_state", "start_date",
    "end_date", "duration_days", "status", "urgency", "expires_at",
)


def db_value(value):
    """Enum members are stored by value."""
    return value.value if isinstance(value, Enum) else value


def split_job_row(row: dict) -> dict:
    """Move the b_* columns of a JOB_SELECT row into a nested business dict."""
    job = {k: v for k, v in row.items() if not k.startswith("b_")}
    job["business"] = {k[2:]: v for k, v in row.items() if k.startswith("b_")}
    return job


def attach_job_details(db: Session, jobs: List[dict]) -> List[dict]:
    """Add required_skills and application_count to each job dict in place."""
    ids = [job["id"] for job in jobs]
    if not ids:
        return jobs

    skills_by_job = {job_id: [] for job_id in ids}
    skill_rows = db.execute(
        text("""
            SELECT jps.job_post_id, s.id, s.name, s.category
            FROM job_post_skills jps JOIN skills s ON s.id = jps.skill_id
            WHERE jps.job_post_id IN :ids
            ORDER BY s.name
        """).bindparams(bindparam("ids", expanding=True)),
        {"ids": ids}
    ).fetchall()
    for job_post_id, skill_id, name, category in skill_rows:
        skills_by_job[job_post_id].append({"id": skill_id, "name": name, "category": category})

    count_rows = db.execute(
        text("""
            SELECT job_post_id, COUNT(*) FROM job_applications
            WHERE job_post_id IN :ids GROUP BY job_post_id
        """).bindparams(bindparam("ids", expanding=True)),
        {"ids": ids}
    ).fetchall()
    counts = {job_post_id: count for job_post_id, count in count_rows}

    for job in jobs:
        job["required_skills"] = skills_by_job[job["id"]]
        job["application_count"] = counts.get(job["id"], 0)
    return jobs


def load_job(db: Session, job_id: str) -> Optional[dict]:
    """Single job with business, skills and application count, or None."""
    row = db.execute(text(JOB_SELECT + " WHERE j.id = :id"), {"id": job_id}).mappings().first()
    if not row:
        return None
    return attach_job_details(db, [split_job_row(dict(row))])[0]


def find_unknown_skills(db: Session, skill_ids: Iterable[str]) -> List[str]:
    """Skill ids from the input that are not in the catalog."""
    wanted = list(dict.fromkeys(skill_ids))
    if not wanted:
        return []
    rows = db.execute(
        text("SELECT id FROM skills WHERE id IN :ids").bindparams(bindparam("ids", expanding=True)),
        {"ids": wanted}
    ).fetchall()
    known = {r[0] for r in rows}
    return [skill_id for skill_id in wanted if skill_id not in known]


def replace_job_skills(db: Session, job_id: str, skill_ids: Iterable[str]) -> None:
    db.execute(text("DELETE FROM job_post_skills WHERE job_post_id = :id"), {"id": job_id})
    for skill_id in dict.fromkeys(skill_ids):
        db.execute(
            text("INSERT INTO job_post_skills (job_post_id, skill_id) VALUES (:jid, :sid)"),
            {"jid": job_id, "sid": skill_id}
        )
