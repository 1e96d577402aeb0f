from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as dateparser
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from jobboard.errors import ValidationError
from jobboard.models.analytics import EVENT_TYPES, AnalyticsEvent
from jobboard.services.visitors import detect_device

DETAILED_LIMIT = 100
POPULAR_LIMIT = 5

def track_event(s: Session, event_type: Optional[str], event_data: Optional[str], url: Optional[str],
                user_agent: str, session_id: Optional[str]) -> AnalyticsEvent:
    if event_type not in EVENT_TYPES:
        raise ValidationError(f"eventType must be one of: {', '.join(EVENT_TYPES)}")
    event = AnalyticsEvent(
        event_type=event_type,
        event_data=str(event_data) if event_data is not None else None,
        url=url,
        device=detect_device(user_agent),
        session_id=session_id or "anonymous",
    )
    s.add(event)
    s.commit()
    return event

def event_stats(s: Session) -> Dict[str, Any]:
    def _count(event_type: str) -> int:
        stmt = select(func.count()).select_from(AnalyticsEvent).where(AnalyticsEvent.event_type == event_type)
        return int(s.scalar(stmt) or 0)

    count = func.count()
    popular = s.execute(
        select(AnalyticsEvent.event_data, count)
        .where(AnalyticsEvent.event_type == "search")
        .group_by(AnalyticsEvent.event_data)
        .order_by(count.desc(), AnalyticsEvent.event_data)
        .limit(POPULAR_LIMIT)
    ).all()

    return {
        "totalViews": _count("page_view"),
        "totalSearches": _count("search"),
        "popularCategories": [{"name": name, "count": int(n)} for name, n in popular],
    }

def _parse_bound(value: str, name: str) -> datetime:
    try:
        parsed = dateparser.parse(value)
    except (ValueError, OverflowError):
        raise ValidationError(f"{name} is not a valid date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed

def detailed_events(s: Session, start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[AnalyticsEvent]:
    """Latest events, restricted to [start_date, end_date] when both are given."""
    stmt = select(AnalyticsEvent)
    if start_date and end_date:
        stmt = stmt.where(
            AnalyticsEvent.timestamp >= _parse_bound(start_date, "startDate"),
            AnalyticsEvent.timestamp <= _parse_bound(end_date, "endDate"),
        )
    stmt = stmt.order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc()).limit(DETAILED_LIMIT)
    return list(s.scalars(stmt).all())
