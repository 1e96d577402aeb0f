"""
Job ingestion: single submissions and bulk CSV imports.

Every ``Job`` is constructed by :func:`build_job`, which owns the derived
fields (slug, isFresherFriendly) so no write path can skip them.
"""
from __future__ import annotations
import logging
import os
import random
import re
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import pandas as pd
from dateutil import parser as dateparser
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.db import utcnow
from jobboard.errors import ValidationError
from jobboard.models.job import CATEGORIES, EXPERIENCE_LEVELS, JOB_TYPES, Job, is_fresher_level

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "company", "location", "description", "applyLink")
BULK_REQUIRED_FIELDS = ("title", "company", "location", "description")
DEFAULT_APPLY_LINK = "https://example.com/apply"

TEMPLATE_COLUMNS = [
    "title", "company", "location", "description",
    "requirements", "salary", "applyLink", "category",
    "jobType", "experienceLevel", "companyDescription",
]
TEMPLATE_SAMPLE = {
    "title": "React Developer",
    "company": "TechCorp",
    "location": "Bangalore",
    "description": "We are looking for a React Developer...",
    "requirements": "React experience\nJavaScript\nREST APIs",
    "salary": "₹4-8 LPA",
    "applyLink": "https://example.com/apply",
    "category": "IT",
    "jobType": "Full-time",
    "experienceLevel": "0-1 years",
    "companyDescription": "TechCorp is a leading software company",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()

def slug_base(title: str) -> str:
    return _NON_ALNUM.sub("-", title.lower()).strip("-")

def timestamp_suffix() -> str:
    return str(int(time.time() * 1000))

def bulk_suffix() -> str:
    # rows are processed in a tight loop, a bare timestamp repeats
    return f"{timestamp_suffix()}{random.randint(0, 999)}"

def make_slug(title: str, suffix: Optional[str] = None) -> str:
    return f"{slug_base(title)}-{suffix or timestamp_suffix()}"

def parse_requirements(value: Any) -> List[str]:
    """Newline separated, else comma separated, else a single requirement."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(r).strip() for r in value if str(r).strip()]
    text = str(value)
    if "\n" in text:
        parts = text.split("\n")
    elif "," in text:
        parts = text.split(",")
    else:
        parts = [text]
    return [p.strip() for p in parts if p.strip()]

def _parse_posted_date(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = dateparser.isoparse(str(value))
    except (ValueError, OverflowError):
        raise ValidationError("postedDate must be an ISO-8601 date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def _choice(data: Mapping[str, Any], key: str, allowed, default: str) -> str:
    value = _text(data.get(key)) or default
    if value not in allowed:
        raise ValidationError(f"{key} must be one of: {', '.join(allowed)}")
    return value

def build_job(data: Mapping[str, Any], slug_suffix: Optional[str] = None) -> Job:
    """Validate and normalize one posting's fields into a ``Job``.

    Any caller-supplied ``isFresherFriendly`` is ignored; it is always derived
    from ``experienceLevel``. A supplied ``slug`` is kept as is, otherwise one
    is derived from the title.
    """
    missing = [f for f in REQUIRED_FIELDS if not _text(data.get(f))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    title = _text(data["title"])
    experience_level = _choice(data, "experienceLevel", EXPERIENCE_LEVELS, "Fresher")

    return Job(
        title=title,
        slug=_text(data.get("slug")) or make_slug(title, slug_suffix),
        company=_text(data["company"]),
        location=_text(data["location"]),
        description=_text(data["description"]),
        requirements=parse_requirements(data.get("requirements")),
        salary=_text(data.get("salary")) or None,
        apply_link=_text(data["applyLink"]),
        category=_choice(data, "category", CATEGORIES, "IT"),
        job_type=_choice(data, "jobType", JOB_TYPES, "Full-time"),
        experience_level=experience_level,
        company_description=_text(data.get("companyDescription")) or None,
        is_fresher_friendly=is_fresher_level(experience_level),
        posted_date=_parse_posted_date(data.get("postedDate")) or utcnow(),
    )

def create_job(s: Session, data: Mapping[str, Any]) -> Job:
    job = build_job(data)
    s.add(job)
    s.commit()
    s.refresh(job)
    logger.info("Created job %s", job.slug)
    return job

@dataclass
class ImportResult:
    processed: int = 0
    created: List[Job] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

def row_to_fields(row: Mapping[str, Any], site_name: str) -> Dict[str, Any]:
    company = _text(row.get("company"))
    return {
        "title": row.get("title"),
        "company": company,
        "location": row.get("location"),
        "description": row.get("description"),
        "requirements": _text(row.get("requirements")) or None,
        "salary": row.get("salary"),
        "applyLink": _text(row.get("applyLink")) or DEFAULT_APPLY_LINK,
        "category": row.get("category"),
        "jobType": row.get("jobType"),
        "experienceLevel": row.get("experienceLevel"),
        "companyDescription": _text(row.get("companyDescription")) or f"{company} is hiring through {site_name}",
    }

def import_rows(s: Session, rows: Iterable[Mapping[str, Any]], site_name: str) -> ImportResult:
    """Create a job per row; a bad row is recorded and skipped, never fatal.

    Rows are numbered from 2, the first line of the file being the header.
    Each row is committed on its own.
    """
    result = ImportResult()
    for row_number, row in enumerate(rows, start=2):
        result.processed += 1
        if any(not _text(row.get(f)) for f in BULK_REQUIRED_FIELDS):
            result.errors.append(f"Row {row_number}: Missing required fields")
            continue
        try:
            job = build_job(row_to_fields(row, site_name), slug_suffix=bulk_suffix())
            s.add(job)
            s.commit()
        except ValidationError as e:
            result.errors.append(f"Row {row_number}: {e.message}")
            continue
        except SQLAlchemyError as e:
            s.rollback()
            logger.warning("Row %s failed to insert: %s", row_number, e)
            result.errors.append(f"Row {row_number}: {e.__class__.__name__}")
            continue
        result.created.append(job)

    logger.info("Bulk import: %s rows, %s created, %s errors",
                result.processed, len(result.created), len(result.errors))
    return result

def read_csv_rows(path: str) -> List[Dict[str, str]]:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not parse CSV file: {e}")
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")

@contextmanager
def saved_upload(file_storage, upload_dir: str) -> Iterator[str]:
    """Save an uploaded file to ``upload_dir`` and remove it on every exit path."""
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, f"{uuid.uuid4().hex}.csv")
    file_storage.save(path)
    try:
        yield path
    finally:
        if os.path.exists(path):
            os.remove(path)

def import_csv_upload(s: Session, file_storage, upload_dir: str, site_name: str) -> ImportResult:
    with saved_upload(file_storage, upload_dir) as path:
        return import_rows(s, read_csv_rows(path), site_name)

def template_csv() -> str:
    return pd.DataFrame([TEMPLATE_SAMPLE], columns=TEMPLATE_COLUMNS).to_csv(index=False)
