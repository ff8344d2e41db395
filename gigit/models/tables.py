"""
SQLAlchemy table definitions (2.x declarative style).

The routes query these tables with hand-written SQL through sqlalchemy.text();
the declarative classes exist so the schema can be created with
Base.metadata.create_all() on both PostgreSQL and SQLite.

Primary keys are opaque uuid4 hex strings generated by the application.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression

ID = String(32)


class Base(DeclarativeBase):
    """Base class for all tables."""
    pass


# ============================================================
# ACCOUNTS & PROFILES
# ============================================================

class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))
    user_type: Mapped[Optional[str]] = mapped_column(String(20))
    name: Mapped[Optional[str]] = mapped_column(String(200))
    image: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.true())
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class WorkerProfile(Base):
    __tablename__ = "worker_profiles"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, server_default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, server_default="")
    phone: Mapped[Optional[str]] = mapped_column(String(40))
    headline: Mapped[Optional[str]] = mapped_column(String(200))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    resume_url: Mapped[Optional[str]] = mapped_column(String(500))
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(500))
    location_city: Mapped[Optional[str]] = mapped_column(String(100))
    location_state: Mapped[Optional[str]] = mapped_column(String(100))
    location_country: Mapped[Optional[str]] = mapped_column(String(100))
    location_zip_code: Mapped[Optional[str]] = mapped_column(String(20))
    hourly_rate: Mapped[Optional[float]] = mapped_column(Float)
    daily_rate: Mapped[Optional[float]] = mapped_column(Float)
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer)
    willing_to_relocate: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    willing_to_travel: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    availability_status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="AVAILABLE")
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="PENDING")
    rating_average: Mapped[Optional[float]] = mapped_column(Float)
    total_jobs_completed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class BusinessProfile(Base):
    __tablename__ = "business_profiles"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    company_registration_number: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(40))
    industry: Mapped[Optional[str]] = mapped_column(String(100))
    company_size: Mapped[Optional[str]] = mapped_column(String(20))
    website: Mapped[Optional[str]] = mapped_column(String(500))
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))
    description: Mapped[Optional[str]] = mapped_column(Text)
    location_city: Mapped[Optional[str]] = mapped_column(String(100))
    location_state: Mapped[Optional[str]] = mapped_column(String(100))
    location_country: Mapped[str] = mapped_column(String(100), nullable=False, server_default="USA")
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="PENDING")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ============================================================
# WORKER DETAILS
# ============================================================

class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)


class WorkerSkill(Base):
    __tablename__ = "worker_skills"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False)
    skill_id: Mapped[str] = mapped_column(ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)
    proficiency_level: Mapped[str] = mapped_column(String(20), nullable=False, server_default="INTERMEDIATE")
    years_of_experience: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (UniqueConstraint("worker_id", "skill_id", name="uq_worker_skill"),)


class WorkExperience(Base):
    __tablename__ = "work_experiences"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    company: Mapped[Optional[str]] = mapped_column(String(200))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    description: Mapped[Optional[str]] = mapped_column(Text)


class Language(Base):
    __tablename__ = "languages"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)  # language code, e.g. "en"
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class WorkerLanguage(Base):
    __tablename__ = "worker_languages"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False)
    language_id: Mapped[str] = mapped_column(ForeignKey("languages.id", ondelete="CASCADE"), nullable=False)
    proficiency: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (UniqueConstraint("worker_id", "language_id", name="uq_worker_language"),)


class License(Base):
    __tablename__ = "licenses"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    issuing_authority: Mapped[Optional[str]] = mapped_column(String(200))
    license_number: Mapped[Optional[str]] = mapped_column(String(100))
    issue_date: Mapped[Optional[date]] = mapped_column(Date)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date)
    state: Mapped[Optional[str]] = mapped_column(String(100))
    document_url: Mapped[Optional[str]] = mapped_column(String(500))
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="PENDING")


class PortfolioItem(Base):
    __tablename__ = "portfolio_items"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    project_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class PortfolioImage(Base):
    __tablename__ = "portfolio_images"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    portfolio_item_id: Mapped[str] = mapped_column(ForeignKey("portfolio_items.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")


# ============================================================
# JOBS, APPLICATIONS, CONTRACTS
# ============================================================

class JobPost(Base):
    __tablename__ = "job_posts"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    business_id: Mapped[str] = mapped_column(ForeignKey("business_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    job_type: Mapped[str] = mapped_column(String(20), nullable=False, server_default="INDIVIDUAL")
    number_of_workers_needed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    budget_min: Mapped[Optional[float]] = mapped_column(Float)
    budget_max: Mapped[Optional[float]] = mapped_column(Float)
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False, server_default="HOURLY")
    location_type: Mapped[str] = mapped_column(String(20), nullable=False, server_default="ON_SITE")
    job_location_city: Mapped[Optional[str]] = mapped_column(String(100))
    job_location_state: Mapped[Optional[str]] = mapped_column(String(100))
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    duration_days: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="DRAFT")
    urgency: Mapped[str] = mapped_column(String(20), nullable=False, server_default="MEDIUM")
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_job_posts_status_published", "status", "published_at"),
    )


class JobPostSkill(Base):
    __tablename__ = "job_post_skills"

    job_post_id: Mapped[str] = mapped_column(ForeignKey("job_posts.id", ondelete="CASCADE"), primary_key=True)
    skill_id: Mapped[str] = mapped_column(ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True)


class JobApplication(Base):
    __tablename__ = "job_applications"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    job_post_id: Mapped[str] = mapped_column(ForeignKey("job_posts.id", ondelete="CASCADE"), nullable=False)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_letter: Mapped[Optional[str]] = mapped_column(Text)
    proposed_rate: Mapped[Optional[float]] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="PENDING")
    applied_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # A worker applies to a job at most once, even under concurrent submits
    __table_args__ = (UniqueConstraint("job_post_id", "worker_id", name="uq_application_job_worker"),)


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    job_post_id: Mapped[str] = mapped_column(ForeignKey("job_posts.id", ondelete="CASCADE"), nullable=False)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id: Mapped[str] = mapped_column(ForeignKey("business_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False, server_default="INDIVIDUAL")
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="ACTIVE")
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    agreed_rate: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (UniqueConstraint("job_post_id", "worker_id", name="uq_contract_job_worker"),)


class SavedJob(Base):
    __tablename__ = "saved_jobs"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    worker_id: Mapped[str] = mapped_column(ForeignKey("worker_profiles.id", ondelete="CASCADE"), nullable=False)
    job_post_id: Mapped[str] = mapped_column(ForeignKey("job_posts.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (UniqueConstraint("worker_id", "job_post_id", name="uq_saved_job"),)


# ============================================================
# MESSAGING & NOTIFICATIONS
# ============================================================

class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    conversation_id: Mapped[str] = mapped_column(ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),)


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    conversation_id: Mapped[str] = mapped_column(ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("ix_messages_conversation_sent", "conversation_id", "sent_at"),)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(ID, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[Optional[str]] = mapped_column(String(500))
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=expression.false())
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)
