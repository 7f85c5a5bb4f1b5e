"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    user = "user"  # legacy name for student
    admin = "admin"
    superadmin = "superadmin"


class CompanyStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    suspended = "suspended"


class InternshipStatus(str, Enum):
    draft = "draft"
    open = "open"
    closed = "closed"


class LocationType(str, Enum):
    onsite = "onsite"
    remote = "remote"
    hybrid = "hybrid"


class ApplicationStatus(str, Enum):
    pending = "pending"
    shortlisted = "shortlisted"
    interviewed = "interviewed"
    accepted = "accepted"
    rejected = "rejected"
    withdrawn = "withdrawn"


# ============================================================
# AUTH / USER SCHEMAS
# ============================================================

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.student

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserPublic(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    image: Optional[str] = None
    role: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(BaseModel):
    bio: Optional[str] = None
    phone_number: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[List[str]] = None
    education: Optional[List[Dict[str, Any]]] = None
    experience: Optional[List[Dict[str, Any]]] = None
    linkedin_profile: Optional[str] = None
    github_profile: Optional[str] = None
    portfolio_url: Optional[str] = None

class ProfileResponse(BaseModel):
    id: str
    user_id: str
    bio: Optional[str] = None
    phone_number: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = []
    education: List[Dict[str, Any]] = []
    experience: List[Dict[str, Any]] = []
    linkedin_profile: Optional[str] = None
    github_profile: Optional[str] = None
    portfolio_url: Optional[str] = None
    updated_at: Optional[datetime] = None


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    owner_id: Optional[str] = None  # superadmin only

class CompanyStatusUpdate(BaseModel):
    status: CompanyStatus

class CompanyResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    owner_id: str
    status: str
    internship_count: int = 0
    is_favorite: bool = False
    created_at: Optional[datetime] = None


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    company_id: str
    location: str = Field(..., min_length=1)
    location_type: LocationType = LocationType.onsite
    duration: int = Field(..., ge=1, description="Duration in weeks")
    stipend: Optional[int] = Field(None, ge=0, description="Monthly stipend")
    skills: List[str] = []
    responsibilities: List[str] = []
    qualifications: List[str] = []
    start_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    status: InternshipStatus = InternshipStatus.open

class InternshipUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    location_type: Optional[LocationType] = None
    duration: Optional[int] = Field(None, ge=1)
    stipend: Optional[int] = Field(None, ge=0)
    skills: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    qualifications: Optional[List[str]] = None
    start_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    status: Optional[InternshipStatus] = None

class InternshipResponse(BaseModel):
    id: str
    title: str
    description: str
    company_id: str
    company: Optional[str] = None
    company_logo: Optional[str] = None
    location: str
    location_type: str
    duration: int
    stipend: Optional[int] = None
    skills: List[str] = []
    responsibilities: List[str] = []
    qualifications: List[str] = []
    start_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    status: str
    is_bookmarked: bool = False
    created_at: Optional[datetime] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    internship_id: str
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    answers: Optional[Dict[str, Any]] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationResponse(BaseModel):
    id: str
    internship_id: str
    internship_title: Optional[str] = None
    company: Optional[str] = None
    status: str
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserPublic] = None

class ApplicationCheckResponse(BaseModel):
    has_applied: bool
    application_id: Optional[str] = None
    status: Optional[str] = None
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class DebugApplicationsResponse(BaseModel):
    user_email: str
    primary_applications: List[ApplicationResponse]
    document_applications: List[ApplicationResponse]
    total_applications: int


class MeResponse(BaseModel):
    user: UserPublic
    profile: Optional[ProfileResponse] = None
    applications: List[ApplicationResponse] = []


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str = "info"
    link: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None

class MarkReadRequest(BaseModel):
    notification_ids: Optional[List[str]] = None


# ============================================================
# RESOURCE SCHEMAS
# ============================================================

class ResourceResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    tags: List[str] = []
    is_free: bool = True
    rating: Optional[float] = None
    views: int = 0


# ============================================================
# SYSTEM SCHEMAS
# ============================================================

class StoreCheck(BaseModel):
    success: bool
    error: Optional[str] = None
    user_count: int = 0
    application_count: int = 0

class StoreCheckResponse(BaseModel):
    primary: StoreCheck
    document: StoreCheck
    database_url: str

class SeedResponse(BaseModel):
    message: str
    companies_created: int
    internships_created: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ToggleResponse(BaseModel):
    message: str
    active: bool
    success: bool = True
