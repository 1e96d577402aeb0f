from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session
from user_agents import parse as parse_ua

from jobboard.db import utcnow
from jobboard.errors import ValidationError
from jobboard.models.visitor import Visitor

logger = logging.getLogger(__name__)

PERIODS = {"24h": timedelta(hours=24), "7d": timedelta(days=7), "30d": timedelta(days=30)}
ALL_TIME_START = datetime(2020, 1, 1)
RECENT_LIMIT = 50

def _device(ua) -> str:
    if ua.is_tablet:
        return "tablet"
    if ua.is_mobile:
        return "mobile"
    return "desktop"

def _family(name: Optional[str]) -> str:
    # the parser reports "Other" when it cannot tell
    return name if name and name != "Other" else "unknown"

def detect_device(user_agent: str) -> str:
    return _device(parse_ua(user_agent or ""))

def parse_user_agent(user_agent: str) -> Tuple[str, str, str]:
    """(device, browser, os) for a User-Agent header."""
    ua = parse_ua(user_agent or "")
    return _device(ua), _family(ua.browser.family), _family(ua.os.family)

def session_id_for(ip_address: str, now: datetime) -> str:
    return f"{ip_address}-{now.date().isoformat()}"

def track_visit(s: Session, ip_address: str, user_agent: str, page: Optional[str],
                referrer: Optional[str] = None, now: Optional[datetime] = None) -> Visitor:
    """Record a page visit, one row per client per page per day.

    Two concurrent first visits can both insert; counts are best effort.
    """
    if not page:
        raise ValidationError("page is required")
    now = now or utcnow()
    session_id = session_id_for(ip_address, now)

    visit = s.scalar(select(Visitor).where(Visitor.session_id == session_id, Visitor.page == page).limit(1))
    if visit is not None:
        visit.visit_count += 1
        visit.visited_at = now
    else:
        device, browser, os_name = parse_user_agent(user_agent)
        visit = Visitor(
            ip_address=ip_address,
            user_agent=user_agent,
            page=page,
            referrer=referrer or "direct",
            device=device,
            browser=browser,
            os=os_name,
            session_id=session_id,
            visit_count=1,
            visited_at=now,
        )
        s.add(visit)
    s.commit()
    return visit

def resolve_period(period: Optional[str]) -> str:
    """The period actually applied; anything unrecognised means 7d."""
    return period if period == "all" or period in PERIODS else "7d"

def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    if period == "all":
        return ALL_TIME_START
    return (now or utcnow()) - PERIODS.get(period, PERIODS["7d"])

def _buckets(s: Session, column, since: datetime, *extra, order_by_count=True, limit=None) -> List[Dict[str, Any]]:
    count = func.count()
    stmt = select(column, count).where(Visitor.visited_at >= since, *extra).group_by(column)
    stmt = stmt.order_by(count.desc(), column) if order_by_count else stmt.order_by(column)
    if limit:
        stmt = stmt.limit(limit)
    return [{"name": str(name) if name is not None else None, "count": int(n)} for name, n in s.execute(stmt).all()]

def visitor_stats(s: Session, period: str = "7d", now: Optional[datetime] = None) -> Dict[str, Any]:
    period = resolve_period(period)
    since = period_start(period, now)
    in_period = Visitor.visited_at >= since

    total = s.scalar(select(func.count()).select_from(Visitor).where(in_period)) or 0
    unique = s.scalar(select(func.count(distinct(Visitor.ip_address))).where(in_period)) or 0

    return {
        "period": period,
        "total": int(total),
        "unique": int(unique),
        "byDay": _buckets(s, func.date(Visitor.visited_at), since, order_by_count=False),
        "byPage": _buckets(s, Visitor.page, since, limit=10),
        "byDevice": _buckets(s, Visitor.device, since),
        "byBrowser": _buckets(s, Visitor.browser, since, limit=5),
        "topReferrers": _buckets(s, Visitor.referrer, since, Visitor.referrer != "direct", limit=5),
    }

def recent_visitors(s: Session, limit: int = RECENT_LIMIT) -> List[Visitor]:
    return list(s.scalars(select(Visitor).order_by(Visitor.visited_at.desc(), Visitor.id.desc()).limit(limit)).all())
