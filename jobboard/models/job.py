from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from jobboard.db import Base, utcnow

CATEGORIES = ("IT", "Non-IT", "Remote", "Freshers")
JOB_TYPES = ("Full-time", "Part-time", "Contract", "Remote", "Internship")
EXPERIENCE_LEVELS = ("Fresher", "0-1 years", "1-3 years", "3-5 years", "5+ years")
FRESHER_LEVELS = frozenset({"Fresher", "0-1 years"})

class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[list] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), default=list)  # list[str]
    salary: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    apply_link: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), default="IT")
    job_type: Mapped[str] = mapped_column(String(20), default="Full-time")
    experience_level: Mapped[str] = mapped_column(String(20), default="Fresher")
    company_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_fresher_friendly: Mapped[bool] = mapped_column(Boolean, default=False)
    posted_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

def is_fresher_level(experience_level: Optional[str]) -> bool:
    return experience_level in FRESHER_LEVELS

# API (camelCase) name -> column attribute, used to resolve sortBy
FIELD_MAP = {
    "id": "id",
    "title": "title",
    "slug": "slug",
    "company": "company",
    "location": "location",
    "description": "description",
    "salary": "salary",
    "applyLink": "apply_link",
    "category": "category",
    "jobType": "job_type",
    "experienceLevel": "experience_level",
    "companyDescription": "company_description",
    "isFresherFriendly": "is_fresher_friendly",
    "postedDate": "posted_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
