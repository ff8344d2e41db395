"""
Worker Service - profile reads and onboarding writes for worker accounts.
"""

import logging
from typing import List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.orm import Session

from gigit.db.database import fetch_all, fetch_one, new_id, utcnow

logger = logging.getLogger(__name__)


PROFILE_COLUMNS = (
    "first_name", "last_name", "phone", "headline", "bio", "resume_url", "linkedin_url",
    "location_city", "location_state", "location_country", "location_zip_code",
    "hourly_rate", "daily_rate", "years_of_experience", "willing_to_relocate", "willing_to_travel",
)


# ============================================================
# READS
# ============================================================

def load_skills(db: Session, worker_id: str) -> List[dict]:
    return fetch_all(
        db,
        """
        SELECT ws.skill_id, s.name, s.category, ws.proficiency_level, ws.years_of_experience
        FROM worker_skills ws JOIN skills s ON s.id = ws.skill_id
        WHERE ws.worker_id = :wid
        ORDER BY s.name
        """,
        {"wid": worker_id}
    )


def load_experiences(db: Session, worker_id: str, limit: Optional[int] = None) -> List[dict]:
    sql = """
        SELECT id, title, company, location, start_date, end_date, is_current, description
        FROM work_experiences WHERE worker_id = :wid
        ORDER BY start_date DESC
    """
    params = {"wid": worker_id}
    if limit:
        sql += " LIMIT :limit"
        params["limit"] = limit
    return fetch_all(db, sql, params)


def load_licenses(db: Session, worker_id: str, limit: Optional[int] = None,
                  include_private: bool = True) -> List[dict]:
    sql = """
        SELECT id, name, issuing_authority, license_number, issue_date, expiry_date, state,
               document_url, verification_status
        FROM licenses WHERE worker_id = :wid
        ORDER BY name
    """
    params = {"wid": worker_id}
    if limit:
        sql += " LIMIT :limit"
        params["limit"] = limit
    licenses = fetch_all(db, sql, params)
    if not include_private:
        for lic in licenses:
            lic["license_number"] = None
            lic["document_url"] = None
    return licenses


def load_languages(db: Session, worker_id: str) -> List[dict]:
    return fetch_all(
        db,
        """
        SELECT wl.language_id, l.name, wl.proficiency
        FROM worker_languages wl JOIN languages l ON l.id = wl.language_id
        WHERE wl.worker_id = :wid
        ORDER BY l.name
        """,
        {"wid": worker_id}
    )


def load_portfolio(db: Session, worker_id: str, item_id: Optional[str] = None) -> List[dict]:
    """Portfolio items (newest project first) with their ordered images."""
    sql = """
        SELECT id, title, description, project_date, created_at
        FROM portfolio_items WHERE worker_id = :wid
    """
    params = {"wid": worker_id}
    if item_id:
        sql += " AND id = :item_id"
        params["item_id"] = item_id
    sql += " ORDER BY project_date DESC, created_at DESC"
    items = fetch_all(db, sql, params)

    if items:
        rows = db.execute(
            text("""
                SELECT id, portfolio_item_id, image_url, display_order
                FROM portfolio_images WHERE portfolio_item_id IN :ids
                ORDER BY display_order
            """).bindparams(bindparam("ids", expanding=True)),
            {"ids": [item["id"] for item in items]}
        ).mappings().all()
        images = {item["id"]: [] for item in items}
        for row in rows:
            images[row["portfolio_item_id"]].append(
                {"id": row["id"], "image_url": row["image_url"], "display_order": row["display_order"]}
            )
        for item in items:
            item["images"] = images[item["id"]]
    return items


def load_worker_profile(db: Session, worker_id: str, include_private: bool = True) -> Optional[dict]:
    """
    Full worker profile with skills, experiences, licenses, languages and portfolio.

    include_private=False blanks license numbers and document URLs, for
    profiles viewed by other users.
    """
    profile = fetch_one(
        db,
        """
        SELECT w.id, w.user_id, u.email, u.image, w.first_name, w.last_name, w.phone, w.headline,
               w.bio, w.resume_url, w.linkedin_url, w.location_city, w.location_state,
               w.location_country, w.location_zip_code, w.hourly_rate, w.daily_rate,
               w.years_of_experience, w.willing_to_relocate, w.willing_to_travel,
               w.availability_status, w.verification_status, w.rating_average,
               w.total_jobs_completed, w.created_at AS member_since
        FROM worker_profiles w JOIN users u ON u.id = w.user_id
        WHERE w.id = :wid
        """,
        {"wid": worker_id}
    )
    if not profile:
        return None

    profile["skills"] = load_skills(db, worker_id)
    profile["work_experiences"] = load_experiences(db, worker_id)
    profile["licenses"] = load_licenses(db, worker_id, include_private=include_private)
    profile["languages"] = load_languages(db, worker_id)
    profile["portfolio_items"] = load_portfolio(db, worker_id)
    return profile


# ============================================================
# WRITES
# ============================================================

def upsert_profile(db: Session, user_id: str, fields: dict) -> str:
    """Insert or update the worker profile for user_id. Returns the worker id."""
    now = utcnow()
    existing = db.execute(
        text("SELECT id FROM worker_profiles WHERE user_id = :u"), {"u": user_id}
    ).fetchone()

    if existing:
        worker_id = existing[0]
        set_clause = ", ".join(f"{col} = :{col}" for col in fields)
        db.execute(
            text(f"UPDATE worker_profiles SET {set_clause}, updated_at = :now WHERE id = :id"),
            {**fields, "now": now, "id": worker_id}
        )
        return worker_id

    worker_id = new_id()
    columns = ", ".join(fields)
    values = ", ".join(f":{col}" for col in fields)
    db.execute(
        text(f"""
            INSERT INTO worker_profiles (id, user_id, {columns}, created_at, updated_at)
            VALUES (:id, :user_id, {values}, :now, :now)
        """),
        {**fields, "id": worker_id, "user_id": user_id, "now": now}
    )
    return worker_id


def replace_skills(db: Session, worker_id: str, skills: list) -> None:
    db.execute(text("DELETE FROM worker_skills WHERE worker_id = :wid"), {"wid": worker_id})
    seen = set()
    for skill in skills:
        if skill.skill_id in seen:
            continue
        seen.add(skill.skill_id)
        db.execute(
            text("""
                INSERT INTO worker_skills (id, worker_id, skill_id, proficiency_level, years_of_experience)
                VALUES (:id, :wid, :sid, :level, :years)
            """),
            {
                "id": new_id(), "wid": worker_id, "sid": skill.skill_id,
                "level": skill.proficiency_level.value, "years": skill.years_of_experience
            }
        )


def replace_experiences(db: Session, worker_id: str, experiences: list) -> None:
    db.execute(text("DELETE FROM work_experiences WHERE worker_id = :wid"), {"wid": worker_id})
    for exp in experiences:
        db.execute(
            text("""
                INSERT INTO work_experiences (id, worker_id, title, company, location, start_date,
                    end_date, is_current, description)
                VALUES (:id, :wid, :title, :company, :location, :start_date, :end_date, :is_current, :description)
            """),
            {
                "id": new_id(), "wid": worker_id, "title": exp.title, "company": exp.company,
                "location": exp.location, "start_date": exp.start_date,
                "end_date": None if exp.is_current else exp.end_date,
                "is_current": exp.is_current, "description": exp.description
            }
        )


def replace_languages(db: Session, worker_id: str, languages: list) -> None:
    db.execute(text("DELETE FROM worker_languages WHERE worker_id = :wid"), {"wid": worker_id})
    seen = set()
    for lang in languages:
        code = lang.language_id.lower()
        if code in seen:
            continue
        seen.add(code)
        if not db.execute(text("SELECT 1 FROM languages WHERE id = :id"), {"id": code}).fetchone():
            db.execute(text("INSERT INTO languages (id, name) VALUES (:id, :name)"), {"id": code, "name": lang.name})
        db.execute(
            text("""
                INSERT INTO worker_languages (id, worker_id, language_id, proficiency)
                VALUES (:id, :wid, :lid, :proficiency)
            """),
            {"id": new_id(), "wid": worker_id, "lid": code, "proficiency": lang.proficiency.value}
        )


def replace_licenses(db: Session, worker_id: str, licenses: list) -> None:
    db.execute(text("DELETE FROM licenses WHERE worker_id = :wid"), {"wid": worker_id})
    for lic in licenses:
        db.execute(
            text("""
                INSERT INTO licenses (id, worker_id, name, issuing_authority, license_number, issue_date,
                    expiry_date, state, document_url, verification_status)
                VALUES (:id, :wid, :name, :authority, :number, :issue_date, :expiry_date, :state,
                    :document_url, 'PENDING')
            """),
            {
                "id": new_id(), "wid": worker_id, "name": lic.name, "authority": lic.issuing_authority,
                "number": lic.license_number, "issue_date": lic.issue_date, "expiry_date": lic.expiry_date,
                "state": lic.state, "document_url": lic.document_url
            }
        )


def replace_portfolio_images(db: Session, item_id: str, images: list) -> None:
    db.execute(text("DELETE FROM portfolio_images WHERE portfolio_item_id = :id"), {"id": item_id})
    for order, image in enumerate(images):
        db.execute(
            text("""
                INSERT INTO portfolio_images (id, portfolio_item_id, image_url, display_order)
                VALUES (:id, :item_id, :url, :display_order)
            """),
            {"id": new_id(), "item_id": item_id, "url": image.url, "display_order": order}
        )
