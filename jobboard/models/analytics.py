from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobboard.db import Base, utcnow

EVENT_TYPES = ("page_view", "search", "application_click", "bookmark", "share")

class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    event_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    device: Mapped[str] = mapped_column(String(20), default="desktop")
    session_id: Mapped[str] = mapped_column(String(128), default="anonymous")
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (Index("ix_analytics_type_ts", "event_type", "timestamp"),)
