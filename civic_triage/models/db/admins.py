from __future__ import annotations
"""SQLAlchemy model for administrators (viewers, admins, super admins)."""
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .reports import Report
from civic_triage.database import Base
from civic_triage.utils.time import utc_now

class Admin(Base):
    __tablename__ = "admins"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String)
    department: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    # Stored as free text (lower-cased on write); legacy rows may hold other values.
    role: Mapped[str] = mapped_column(String, default="viewer", index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)

    resolved_reports: Mapped[list["Report"]] = relationship("Report", back_populates="resolved_by")
