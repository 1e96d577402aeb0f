from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobboard.db import Base, utcnow


class Visitor(Base):
    __tablename__ = "visitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str] = mapped_column(Text, nullable=False)
    page: Mapped[str] = mapped_column(String(512), nullable=False)
    referrer: Mapped[str] = mapped_column(String(512), default="direct")
    device: Mapped[str] = mapped_column(String(20), default="desktop")
    browser: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    os: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    visit_count: Mapped[int] = mapped_column(Integer, default=1)
    visited_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_visitors_session_page", "session_id", "page"),
        Index("ix_visitors_ip_visited", "ip_address", "visited_at"),
    )
