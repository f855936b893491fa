from __future__ import annotations
"""SQLAlchemy models for citizen reports and their engagement counters."""
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, Text, Float, DateTime, Boolean, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

if TYPE_CHECKING:  # pragma: no cover
    from .admins import Admin
from civic_triage.config import DEFAULT_DEPARTMENT
from civic_triage.database import Base
from civic_triage.utils.time import utc_now
from .enums import PriorityLevel

class Report(Base):
    __tablename__ = "reports"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)

    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String, default="other", index=True)
    priority: Mapped[PriorityLevel] = mapped_column(Enum(PriorityLevel), default=PriorityLevel.MEDIUM, index=True)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    address: Mapped[str] = mapped_column(String, default="")
    department: Mapped[str] = mapped_column(String, default=DEFAULT_DEPARTMENT, index=True)

    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_by_admin_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("admins.id"), nullable=True)
    time_taken_to_resolve: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, index=True)

    resolved_by: Mapped["Admin | None"] = relationship("Admin", back_populates="resolved_reports")
    engagement: Mapped["ReportEngagement | None"] = relationship(
        "ReportEngagement", back_populates="report", uselist=False, cascade="all, delete-orphan"
    )

    # Coordinates travel together; proximity is skipped when both are absent.
    __table_args__ = (
        CheckConstraint(
            "(latitude IS NULL AND longitude IS NULL) OR (latitude IS NOT NULL AND longitude IS NOT NULL)",
            name="report_coordinates_both_or_neither"
        ),
    )

class ReportEngagement(Base):
    """Community interaction counters supplied by the social subsystem."""
    __tablename__ = "report_engagement"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    report_id: Mapped[int] = mapped_column(Integer, ForeignKey("reports.id"), unique=True, index=True)

    view_count: Mapped[int] = mapped_column(Integer, default=0)
    upvotes: Mapped[int] = mapped_column(Integer, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, default=0)
    share_count: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    report: Mapped["Report"] = relationship("Report", back_populates="engagement")
