from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional

from jobboard.models import AnalyticsEvent, Job, Visitor

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None

def job_to_dict(j: Job) -> Dict[str, Any]:
    return {
        "id": j.id,
        "title": j.title,
        "slug": j.slug,
        "company": j.company,
        "location": j.location,
        "description": j.description,
        "requirements": j.requirements or [],
        "salary": j.salary,
        "applyLink": j.apply_link,
        "category": j.category,
        "jobType": j.job_type,
        "experienceLevel": j.experience_level,
        "companyDescription": j.company_description,
        "isFresherFriendly": bool(j.is_fresher_friendly),
        "postedDate": _iso(j.posted_date),
        "createdAt": _iso(j.created_at),
        "updatedAt": _iso(j.updated_at),
    }

def visitor_to_dict(v: Visitor) -> Dict[str, Any]:
    return {
        "id": v.id,
        "ipAddress": v.ip_address,
        "userAgent": v.user_agent,
        "page": v.page,
        "referrer": v.referrer,
        "device": v.device,
        "browser": v.browser,
        "os": v.os,
        "sessionId": v.session_id,
        "visitCount": v.visit_count,
        "visitedAt": _iso(v.visited_at),
    }

def event_to_dict(e: AnalyticsEvent) -> Dict[str, Any]:
    return {
        "id": e.id,
        "eventType": e.event_type,
        "eventData": e.event_data,
        "url": e.url,
        "device": e.device,
        "sessionId": e.session_id,
        "timestamp": _iso(e.timestamp),
    }
