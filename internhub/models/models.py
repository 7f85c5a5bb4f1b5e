"""
ORM models for the primary store.

Ids are 24-hex strings (bson ObjectId text) so that a record keeps the
same id in both stores. References between entities are plain indexed
columns without foreign keys: the referenced row may only exist in the
document store.
"""

from datetime import datetime
from bson import ObjectId
from sqlalchemy import (
    Boolean, Column, DateTime, Float, Integer, JSON, String, Text, UniqueConstraint
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    return str(ObjectId())


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=new_id)
    name = Column(String(200))
    email = Column(String(320), unique=True, nullable=False, index=True)
    password = Column(String(200))  # bcrypt hash; null for identity-provider accounts
    image = Column(String(500))
    role = Column(String(20), nullable=False, default="student")


class Profile(TimestampMixin, Base):
    __tablename__ = "profiles"

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), unique=True, nullable=False, index=True)
    bio = Column(Text)
    phone_number = Column(String(50))
    location = Column(String(200))
    skills = Column(JSON, default=list)
    education = Column(JSON, default=list)
    experience = Column(JSON, default=list)
    linkedin_profile = Column(String(500))
    github_profile = Column(String(500))
    portfolio_url = Column(String(500))


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id = Column(String(24), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    logo = Column(String(500))
    website = Column(String(500))
    location = Column(String(200))
    industry = Column(String(100))
    size = Column(String(50))
    owner_id = Column(String(24), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending")


class Internship(TimestampMixin, Base):
    __tablename__ = "internships"

    id = Column(String(24), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    company_id = Column(String(24), nullable=False, index=True)
    location = Column(String(200), nullable=False)
    location_type = Column(String(20), nullable=False, default="onsite")
    duration = Column(Integer, nullable=False)  # weeks
    stipend = Column(Integer)  # per month
    skills = Column(JSON, default=list)
    responsibilities = Column(JSON, default=list)
    qualifications = Column(JSON, default=list)
    start_date = Column(DateTime)
    application_deadline = Column(DateTime)
    status = Column(String(20), nullable=False, default="open", index=True)


class Application(TimestampMixin, Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("user_id", "internship_id", name="uq_application_user_internship"),)

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), nullable=False, index=True)
    internship_id = Column(String(24), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending")
    cover_letter = Column(Text)
    resume_url = Column(String(500))
    answers = Column(JSON)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="info")
    link = Column(String(500))
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Resource(TimestampMixin, Base):
    __tablename__ = "resources"

    id = Column(String(24), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    type = Column(String(50))
    url = Column(String(500))
    tags = Column(JSON, default=list)
    is_free = Column(Boolean, default=True)
    rating = Column(Float)
    views = Column(Integer, default=0)


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "internship_id", name="uq_bookmark_user_internship"),)

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), nullable=False, index=True)
    internship_id = Column(String(24), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class FavoriteCompany(Base):
    __tablename__ = "favorite_companies"
    __table_args__ = (UniqueConstraint("user_id", "company_id", name="uq_favorite_user_company"),)

    id = Column(String(24), primary_key=True, default=new_id)
    user_id = Column(String(24), nullable=False, index=True)
    company_id = Column(String(24), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
