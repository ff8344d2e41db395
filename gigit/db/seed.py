"""
Seed data - skill catalog and demo accounts.

The skill catalog is inserted on startup (idempotent). Demo accounts are
only created when running this module directly:

    python -m gigit.db.seed
"""

import logging

from sqlalchemy import text

from gigit.db.database import get_db_session, init_db, new_id, utcnow

logger = logging.getLogger(__name__)


SKILL_CATALOG = {
    "Construction & Building": [
        "Plumbing", "Welding", "Painting", "Carpentry", "Masonry", "Roofing",
        "Electrical Work", "HVAC", "Drywall Installation", "Flooring",
    ],
    "Maintenance & Repair": [
        "General Maintenance", "Appliance Repair", "Equipment Repair", "Facility Maintenance",
    ],
    "Landscaping & Outdoor": ["Landscaping", "Gardening", "Tree Service", "Irrigation"],
    "Automotive": ["Auto Mechanics", "Auto Body Repair", "Auto Painting"],
    "Cleaning & Sanitation": ["Commercial Cleaning", "Deep Cleaning", "Janitorial Services"],
    "Manufacturing": ["CNC Operation", "Machine Operation", "Assembly", "Quality Control"],
    "Other Skilled Trades": ["Locksmith", "Glass Installation", "Security Installation"],
}


def seed_skills() -> int:
    """Insert catalog skills that are missing. Returns how many were added."""
    added = 0
    with get_db_session() as db:
        existing = {row[0] for row in db.execute(text("SELECT name FROM skills")).fetchall()}
        for category, names in SKILL_CATALOG.items():
            for name in names:
                if name in existing:
                    continue
                db.execute(
                    text("INSERT INTO skills (id, name, category) VALUES (:id, :name, :category)"),
                    {"id": new_id(), "name": name, "category": category}
                )
                added += 1
    if added:
        logger.info("Seeded %d skills", added)
    return added


def _upsert_demo_user(db, email: str, password: str, user_type: str, name: str) -> str:
    from gigit.core.auth import hash_password

    row = db.execute(text("SELECT id FROM users WHERE email = :email"), {"email": email}).fetchone()
    if row:
        return row[0]

    user_id = new_id()
    now = utcnow()
    db.execute(
        text("""
            INSERT INTO users (id, email, password_hash, user_type, name, is_active,
                onboarding_completed, email_verified_at, created_at, updated_at)
            VALUES (:id, :email, :password_hash, :user_type, :name, :active,
                :onboarded, :now, :now, :now)
        """),
        {
            "id": user_id, "email": email, "password_hash": hash_password(password),
            "user_type": user_type, "name": name, "active": True,
            "onboarded": user_type != "ADMIN", "now": now
        }
    )
    return user_id


def seed_demo_accounts() -> None:
    """Create an admin, a worker and a business account for local testing."""
    now = utcnow()
    with get_db_session() as db:
        _upsert_demo_user(db, "admin@gigit.com", "Admin@123", "ADMIN", "Admin")

        worker_user_id = _upsert_demo_user(db, "worker@example.com", "Worker@123", "WORKER", "John Smith")
        if not db.execute(text("SELECT id FROM worker_profiles WHERE user_id = :u"), {"u": worker_user_id}).fetchone():
            worker_id = new_id()
            db.execute(
                text("""
                    INSERT INTO worker_profiles (id, user_id, first_name, last_name, phone, bio,
                        years_of_experience, hourly_rate, availability_status, location_city,
                        location_state, location_country, verification_status, rating_average,
                        total_jobs_completed, willing_to_relocate, willing_to_travel, created_at, updated_at)
                    VALUES (:id, :user_id, 'John', 'Smith', '+1234567890', :bio, 10, 75.0, 'AVAILABLE',
                        'New York', 'NY', 'USA', 'VERIFIED', 4.8, 127, :no, :no, :now, :now)
                """),
                {
                    "id": worker_id, "user_id": worker_user_id, "no": False, "now": now,
                    "bio": "Experienced plumber with 10+ years in residential and commercial plumbing. Licensed and insured."
                }
            )
            for skill_name, level, years in [("Plumbing", "EXPERT", 10), ("Welding", "INTERMEDIATE", 5)]:
                skill = db.execute(text("SELECT id FROM skills WHERE name = :n"), {"n": skill_name}).fetchone()
                if skill:
                    db.execute(
                        text("""
                            INSERT INTO worker_skills (id, worker_id, skill_id, proficiency_level, years_of_experience)
                            VALUES (:id, :wid, :sid, :level, :years)
                        """),
                        {"id": new_id(), "wid": worker_id, "sid": skill[0], "level": level, "years": years}
                    )

        business_user_id = _upsert_demo_user(db, "business@example.com", "Business@123", "BUSINESS", "BuildCo Construction")
        if not db.execute(text("SELECT id FROM business_profiles WHERE user_id = :u"), {"u": business_user_id}).fetchone():
            db.execute(
                text("""
                    INSERT INTO business_profiles (id, user_id, company_name, company_registration_number,
                        phone, industry, company_size, website, description, location_city,
                        location_state, location_country, verification_status, created_at, updated_at)
                    VALUES (:id, :user_id, 'BuildCo Construction', 'REG123456', '+1987654321',
                        'Construction', 'MEDIUM', 'https://buildco.example.com', :description,
                        'New York', 'NY', 'USA', 'VERIFIED', :now, :now)
                """),
                {
                    "id": new_id(), "user_id": business_user_id, "now": now,
                    "description": "Leading construction company specializing in commercial and residential projects."
                }
            )
    logger.info("Demo accounts ready: admin@gigit.com, worker@example.com, business@example.com")


def main() -> None:
    from gigit.core.logging_config import setup_logging

    setup_logging()
    init_db()
    seed_skills()
    seed_demo_accounts()


if __name__ == "__main__":
    main()
