"""
Job listing query engine.

Turns loosely-typed request parameters into a filtered, sorted and paginated
slice of the ``jobs`` table plus the facet lists used by the filter dropdowns.
Optional parameters never fail the request: anything that cannot be parsed is
treated as "no filter".
"""
from __future__ import annotations
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import asc, desc, distinct, func, or_, select
from sqlalchemy.orm import Session

from jobboard.db import utcnow
from jobboard.errors import NotFoundError
from jobboard.models.job import FIELD_MAP, Job
from jobboard.serializers import job_to_dict

DATE_POSTED_DAYS = {"today": 1, "3days": 3, "7days": 7, "30days": 30}
DEFAULT_SORT_BY = "postedDate"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
LOCATION_OPTIONS_LIMIT = 20

def _param(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

def _contains(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

def date_posted_offset(value: Optional[str]) -> Optional[int]:
    """Day offset for a ``datePosted`` value, or None when it is not recognised.

    ``today`` is "within the last day", not "since midnight".
    """
    if value is None:
        return None
    if value in DATE_POSTED_DAYS:
        return DATE_POSTED_DAYS[value]
    try:
        return int(value)
    except ValueError:
        return None

def date_posted_threshold(value: Optional[str], now: datetime) -> Optional[datetime]:
    """Earliest postedDate kept by ``datePosted``; None means no filter.

    Offsets reaching outside the datetime range are ignored like any other
    unusable value.
    """
    offset = date_posted_offset(value)
    if offset is None:
        return None
    try:
        return now - timedelta(days=offset)
    except OverflowError:
        return None

def build_filters(params: Mapping[str, Any], now: Optional[datetime] = None) -> List[Any]:
    """WHERE clauses for the listing, to be AND-ed together."""
    now = now or utcnow()
    clauses: List[Any] = []

    search = _param(params, "search")
    if search:
        like = _contains(search)
        clauses.append(or_(
            Job.title.ilike(like, escape="\\"),
            Job.company.ilike(like, escape="\\"),
            Job.description.ilike(like, escape="\\"),
            Job.location.ilike(like, escape="\\"),
        ))

    category = _param(params, "category")
    if category:
        clauses.append(Job.category == category)
    job_type = _param(params, "jobType")
    if job_type:
        clauses.append(Job.job_type == job_type)
    experience_level = _param(params, "experienceLevel")
    if experience_level:
        clauses.append(Job.experience_level == experience_level)

    location = _param(params, "location")
    if location:
        clauses.append(Job.location.ilike(_contains(location), escape="\\"))

    if _param(params, "isFresherFriendly") == "true":
        clauses.append(Job.is_fresher_friendly.is_(True))

    threshold = date_posted_threshold(_param(params, "datePosted"), now)
    if threshold is not None:
        clauses.append(Job.posted_date >= threshold)

    return clauses

def build_order(sort_by: Optional[str], sort_order: Optional[str]) -> List[Any]:
    """ORDER BY for the listing.

    ``sortBy`` may name any job field by its API or column name. Unknown names
    add no field ordering. The id tiebreaker keeps pages stable.
    """
    direction = desc if (sort_order or "desc") == "desc" else asc
    attr = FIELD_MAP.get(sort_by or DEFAULT_SORT_BY)
    if attr is None and sort_by in FIELD_MAP.values():
        attr = sort_by
    order = []
    if attr and attr != "id":
        order.append(direction(getattr(Job, attr)))
    order.append(direction(Job.id))
    return order

def _distinct_values(s: Session, column, limit: Optional[int] = None) -> List[str]:
    stmt = select(distinct(column)).where(column.is_not(None), column != "").order_by(column)
    if limit:
        stmt = stmt.limit(limit)
    return list(s.scalars(stmt).all())

def get_filter_options(s: Session) -> Dict[str, List[str]]:
    """Distinct values over the whole collection, regardless of any filter."""
    return {
        "categories": _distinct_values(s, Job.category),
        "jobTypes": _distinct_values(s, Job.job_type),
        "experienceLevels": _distinct_values(s, Job.experience_level),
        "locations": _distinct_values(s, Job.location, LOCATION_OPTIONS_LIMIT),
    }

def list_jobs(s: Session, params: Mapping[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    page = max(_to_int(params.get("page"), DEFAULT_PAGE), 1)
    limit = max(_to_int(params.get("limit"), DEFAULT_LIMIT), 1)

    stmt = select(Job).where(*build_filters(params, now))
    total = s.scalar(select(func.count()).select_from(stmt.subquery())) or 0

    stmt = stmt.order_by(*build_order(_param(params, "sortBy"), _param(params, "sortOrder")))
    offset = (page - 1) * limit
    if offset >= total:
        # past the last page; also keeps huge page/limit values away from the store
        rows = []
    else:
        rows = s.scalars(stmt.offset(offset).limit(min(limit, total - offset))).all()

    return {
        "jobs": [job_to_dict(r) for r in rows],
        "pagination": {
            "total": int(total),
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
        "filterOptions": get_filter_options(s),
    }

def get_job_by_slug(s: Session, slug: str) -> Job:
    job = s.scalar(select(Job).where(Job.slug == slug).limit(1))
    if job is None:
        raise NotFoundError("Job not found")
    return job
