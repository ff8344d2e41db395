"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

import re
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================


class JobType(str, Enum):
    individual = "INDIVIDUAL"
    bulk = "BULK"


class JobStatus(str, Enum):
    draft = "DRAFT"
    active = "ACTIVE"
    closed = "CLOSED"
    cancelled = "CANCELLED"


class PaymentType(str, Enum):
    hourly = "HOURLY"
    daily = "DAILY"
    fixed = "FIXED"


class LocationType(str, Enum):
    on_site = "ON_SITE"
    remote = "REMOTE"
    hybrid = "HYBRID"


class Urgency(str, Enum):
    low = "LOW"
    medium = "MEDIUM"
    high = "HIGH"
    urgent = "URGENT"


class ApplicationStatus(str, Enum):
    pending = "PENDING"
    reviewed = "REVIEWED"
    shortlisted = "SHORTLISTED"
    accepted = "ACCEPTED"
    rejected = "REJECTED"
    withdrawn = "WITHDRAWN"


class ContractStatus(str, Enum):
    pending = "PENDING"
    active = "ACTIVE"
    completed = "COMPLETED"
    cancelled = "CANCELLED"
    disputed = "DISPUTED"


class ProficiencyLevel(str, Enum):
    beginner = "BEGINNER"
    intermediate = "INTERMEDIATE"
    advanced = "ADVANCED"
    expert = "EXPERT"


class LanguageProficiency(str, Enum):
    basic = "BASIC"
    conversational = "CONVERSATIONAL"
    fluent = "FLUENT"
    native = "NATIVE"


class AvailabilityStatus(str, Enum):
    available = "AVAILABLE"
    busy = "BUSY"
    not_available = "NOT_AVAILABLE"


class CompanySize(str, Enum):
    small = "SMALL"
    medium = "MEDIUM"
    large = "LARGE"
    enterprise = "ENTERPRISE"


class JobSort(str, Enum):
    newest = "newest"
    oldest = "oldest"
    budget_high = "budget_high"
    budget_low = "budget_low"
    urgency = "urgency"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    user_type: Literal["WORKER", "BUSINESS"]
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None

class RegisteredUser(BaseModel):
    id: str
    email: str
    user_type: str

class RegisterResponse(BaseModel):
    success: bool = True
    user: RegisteredUser

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    user_type: Optional[str] = None
    onboarding_completed: bool = False

class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    user_type: Optional[str] = None
    is_active: bool
    onboarding_completed: bool
    created_at: datetime

class UserTypeUpdate(BaseModel):
    user_type: Literal["WORKER", "BUSINESS"]

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(..., min_length=8)


# ============================================================
# SKILL SCHEMAS
# ============================================================

class SkillResponse(BaseModel):
    id: str
    name: str
    category: str


# ============================================================
# WORKER SCHEMAS
# ============================================================

def _month_to_date(value):
    """Accept "YYYY-MM" month strings (first of month) as well as full dates."""
    if isinstance(value, str) and re.fullmatch(r"\d{4}-\d{2}", value.strip()):
        return f"{value.strip()}-01"
    return value


class WorkerSkillInput(BaseModel):
    skill_id: str
    proficiency_level: ProficiencyLevel = ProficiencyLevel.intermediate
    years_of_experience: Optional[int] = Field(None, ge=0, le=70)

class WorkExperienceInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = None

    _parse_months = field_validator("start_date", "end_date", mode="before")(_month_to_date)

class LanguageInput(BaseModel):
    language_id: str = Field(..., min_length=2, max_length=20)
    name: str
    proficiency: LanguageProficiency = LanguageProficiency.conversational

class LicenseInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    issuing_authority: Optional[str] = None
    license_number: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    state: Optional[str] = None
    document_url: Optional[str] = None

class WorkerOnboardingRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    headline: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = None
    resume_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    location_zip_code: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    daily_rate: Optional[float] = Field(None, ge=0)
    years_of_experience: Optional[int] = Field(None, ge=0, le=70)
    willing_to_relocate: bool = False
    willing_to_travel: bool = False
    skills: List[WorkerSkillInput] = []
    # None leaves the existing rows alone; an empty list clears them
    work_experiences: Optional[List[WorkExperienceInput]] = None
    languages: Optional[List[LanguageInput]] = None
    licenses: Optional[List[LicenseInput]] = None

class WorkerProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    headline: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    location_zip_code: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    daily_rate: Optional[float] = Field(None, ge=0)
    years_of_experience: Optional[int] = Field(None, ge=0, le=70)
    willing_to_relocate: Optional[bool] = None
    willing_to_travel: Optional[bool] = None
    availability_status: Optional[AvailabilityStatus] = None

class WorkerSkillResponse(BaseModel):
    skill_id: str
    name: str
    category: str
    proficiency_level: str
    years_of_experience: Optional[int] = None

class WorkExperienceResponse(BaseModel):
    id: str
    title: str
    company: Optional[str] = None
    location: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    is_current: bool
    description: Optional[str] = None

class WorkerLanguageResponse(BaseModel):
    language_id: str
    name: str
    proficiency: str

class LicenseResponse(BaseModel):
    id: str
    name: str
    issuing_authority: Optional[str] = None
    license_number: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    state: Optional[str] = None
    document_url: Optional[str] = None
    verification_status: str


# ============================================================
# PORTFOLIO SCHEMAS
# ============================================================

class PortfolioImageInput(BaseModel):
    url: str = Field(..., min_length=1)

class PortfolioItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    project_date: date
    images: List[PortfolioImageInput] = []

class PortfolioImageResponse(BaseModel):
    id: str
    image_url: str
    display_order: int

class PortfolioItemResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    project_date: date
    images: List[PortfolioImageResponse] = []
    created_at: datetime


class WorkerSummary(BaseModel):
    id: str
    user_id: str
    first_name: str
    last_name: str
    headline: Optional[str] = None

class WorkerProfileResponse(BaseModel):
    id: str
    user_id: str
    email: str
    image: Optional[str] = None
    first_name: str
    last_name: str
    phone: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    resume_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    location_zip_code: Optional[str] = None
    hourly_rate: Optional[float] = None
    daily_rate: Optional[float] = None
    years_of_experience: Optional[int] = None
    willing_to_relocate: bool
    willing_to_travel: bool
    availability_status: str
    verification_status: str
    rating_average: Optional[float] = None
    total_jobs_completed: int
    member_since: datetime
    skills: List[WorkerSkillResponse] = []
    work_experiences: List[WorkExperienceResponse] = []
    licenses: List[LicenseResponse] = []
    languages: List[WorkerLanguageResponse] = []
    portfolio_items: List[PortfolioItemResponse] = []


# ============================================================
# BUSINESS SCHEMAS
# ============================================================

class BusinessOnboardingRequest(BaseModel):
    company_name: str = Field(..., min_length=2, max_length=200)
    company_registration_number: Optional[str] = None
    phone: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[CompanySize] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    description: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

class BusinessSummary(BaseModel):
    id: str
    company_name: str
    logo_url: Optional[str] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    verification_status: Optional[str] = None

class BusinessDetail(BusinessSummary):
    description: Optional[str] = None
    location_country: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    website: Optional[str] = None


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10)
    required_skills: List[str] = []
    job_type: JobType = JobType.individual
    number_of_workers_needed: int = Field(1, ge=1)
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    payment_type: PaymentType = PaymentType.hourly
    location_type: LocationType = LocationType.on_site
    job_location_city: Optional[str] = None
    job_location_state: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration_days: Optional[int] = Field(None, ge=1)
    urgency: Urgency = Urgency.medium
    expires_at: Optional[datetime] = None
    publish: bool = False

    @model_validator(mode="after")
    def check_budget_range(self):
        if self.budget_min is not None and self.budget_max is not None and self.budget_min > self.budget_max:
            raise ValueError("budget_min cannot be greater than budget_max")
        return self

JOB_REQUIRED_FIELDS = {
    "title", "description", "job_type", "number_of_workers_needed",
    "payment_type", "location_type", "status", "urgency",
}

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    required_skills: Optional[List[str]] = None
    job_type: Optional[JobType] = None
    number_of_workers_needed: Optional[int] = Field(None, ge=1)
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    payment_type: Optional[PaymentType] = None
    location_type: Optional[LocationType] = None
    job_location_city: Optional[str] = None
    job_location_state: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration_days: Optional[int] = Field(None, ge=1)
    status: Optional[JobStatus] = None
    urgency: Optional[Urgency] = None
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        # Omit a field to leave it unchanged; null is only valid for optional columns
        nulled = sorted(
            name for name in self.model_fields_set & JOB_REQUIRED_FIELDS
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self

class JobSummary(BaseModel):
    id: str
    title: str
    status: str
    job_type: str
    payment_type: str
    location_type: str
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    job_location_city: Optional[str] = None
    job_location_state: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class JobResponse(JobSummary):
    business_id: str
    description: str
    number_of_workers_needed: int
    duration_days: Optional[int] = None
    urgency: str
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    required_skills: List[SkillResponse] = []
    application_count: int = 0
    business: Optional[BusinessSummary] = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    pagination: Pagination


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None
    proposed_rate: Optional[float] = Field(None, ge=0)

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationResponse(BaseModel):
    id: str
    job_post_id: str
    worker_id: str
    cover_letter: Optional[str] = None
    proposed_rate: Optional[float] = None
    status: str
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    updated_at: datetime

class WorkerApplicationResponse(ApplicationResponse):
    job: JobSummary
    business: BusinessSummary

class ApplicantProfile(WorkerSummary):
    email: str
    image: Optional[str] = None
    hourly_rate: Optional[float] = None
    years_of_experience: Optional[int] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    rating_average: Optional[float] = None
    skills: List[WorkerSkillResponse] = []
    work_experiences: List[WorkExperienceResponse] = []
    licenses: List[LicenseResponse] = []

class JobApplicantResponse(ApplicationResponse):
    worker: ApplicantProfile

class JobDetailResponse(JobResponse):
    business: Optional[BusinessDetail] = None
    has_applied: bool = False
    is_saved: bool = False
    application: Optional[ApplicationResponse] = None


# ============================================================
# CONTRACT SCHEMAS
# ============================================================

class ContractStatusUpdate(BaseModel):
    status: ContractStatus

class ContractResponse(BaseModel):
    id: str
    job_post_id: str
    worker_id: str
    business_id: str
    contract_type: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    agreed_rate: float
    completed_at: Optional[datetime] = None
    created_at: datetime

class WorkerContractResponse(ContractResponse):
    job: JobSummary
    business: BusinessSummary

class BusinessContractResponse(ContractResponse):
    job: JobSummary
    worker: WorkerSummary

class WorkerContractListResponse(BaseModel):
    contracts: List[WorkerContractResponse]
    pagination: Pagination

class BusinessContractListResponse(BaseModel):
    contracts: List[BusinessContractResponse]
    pagination: Pagination


# ============================================================
# SAVED JOB SCHEMAS
# ============================================================

class SavedJobResponse(BaseModel):
    id: str
    job_post_id: str
    created_at: datetime
    job: Optional[JobResponse] = None


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class DashboardStats(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    pending_applications: int
    total_contracts: int
    active_contracts: int

class RecentJob(BaseModel):
    id: str
    title: str
    status: str
    published_at: Optional[datetime] = None
    application_count: int

class RecentApplication(BaseModel):
    id: str
    status: str
    applied_at: datetime
    worker_first_name: str
    worker_last_name: str
    job_post_id: str
    job_title: str

class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_jobs: List[RecentJob]
    recent_applications: List[RecentApplication]


# ============================================================
# MESSAGING SCHEMAS
# ============================================================

class ChatMessageCreate(BaseModel):
    receiver_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v

class MessageSender(BaseModel):
    id: str
    name: Optional[str] = None
    image: Optional[str] = None

class ChatMessageResponse(BaseModel):
    id: str
    conversation_id: str
    content: str
    sent_at: datetime
    is_read: bool
    sender_id: str
    sender: Optional[MessageSender] = None

class ConversationUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None
    user_type: Optional[str] = None

class ConversationSummary(BaseModel):
    id: str
    other_user: Optional[ConversationUser] = None
    last_message: Optional[ChatMessageResponse] = None
    unread_count: int
    updated_at: datetime

class BusinessBrief(BaseModel):
    id: str
    company_name: str

class ConversationPartner(ConversationUser):
    worker_profile: Optional[WorkerSummary] = None
    business_profile: Optional[BusinessBrief] = None

class ConversationDetailResponse(BaseModel):
    conversation_id: Optional[str] = None
    messages: List[ChatMessageResponse]
    other_user: ConversationPartner


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: datetime

class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    pagination: Pagination

class NotificationCountResponse(BaseModel):
    count: int

class NotificationAction(BaseModel):
    action: Literal["markRead", "markAllRead"]
    notification_id: Optional[str] = None

    @model_validator(mode="after")
    def require_id_for_single(self):
        if self.action == "markRead" and not self.notification_id:
            raise ValueError("notification_id is required for markRead")
        return self


# ============================================================
# UPLOAD SCHEMAS
# ============================================================

class UploadRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1)
    folder: str
    size: Optional[int] = Field(None, ge=0, description="File size in bytes, checked against the upload limit")

class UploadResponse(BaseModel):
    upload_url: str
    key: str
    public_url: str


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
