"""
Citizen-facing endpoints: a user's own reports and their statistics.
"""
from datetime import timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from civic_triage.api.deps import get_db, get_pagination_params
from civic_triage.config import USER_STATS_RECENT_DAYS
from civic_triage.models.db import Report
from civic_triage.models.db.enums import PriorityLevel
from civic_triage.models.schemas import PaginationMeta, ReportRead, UserReportList, UserReportStats
from civic_triage.utils import get_logger
from civic_triage.utils.time import resolution_minutes, utc_now

router = APIRouter()
logger = get_logger(__name__)

def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

@router.get(
    "/{user_id}/reports",
    response_model=UserReportList,
    summary="List a user's reports",
    description="Most recent first; optional resolution, category and priority filters"
)
async def list_user_reports(
    user_id: int,
    is_resolved: Optional[bool] = Query(None),
    category: Optional[str] = Query(None),
    priority: Optional[PriorityLevel] = Query(None),
    pagination: dict = Depends(get_pagination_params),
    db: Session = Depends(get_db)
) -> UserReportList:
    query = db.query(Report).filter(Report.user_id == user_id)
    if is_resolved is not None:
        query = query.filter(Report.is_resolved == is_resolved)
    if category:
        query = query.filter(Report.category == category)
    if priority:
        query = query.filter(Report.priority == priority)

    total = query.count()
    reports = (
        query.order_by(Report.created_at.desc(), Report.id.desc())
        .offset(pagination["offset"])
        .limit(pagination["limit"])
        .all()
    )
    logger.info("User reports fetched", user_id=user_id, count=len(reports), total=total)

    return UserReportList(
        reports=[ReportRead.model_validate(r) for r in reports],
        pagination=PaginationMeta(
            total=total,
            limit=pagination["limit"],
            offset=pagination["offset"],
            has_more=(pagination["offset"] + pagination["limit"]) < total,
        ),
    )

@router.get(
    "/{user_id}/reports/stats",
    response_model=UserReportStats,
    summary="Statistics for a user's reports"
)
async def get_user_report_stats(user_id: int, db: Session = Depends(get_db)) -> UserReportStats:
    recent_since = utc_now() - timedelta(days=USER_STATS_RECENT_DAYS)
    total, resolved, critical, high, recent = db.query(
        func.count(Report.id),
        _count_where(Report.is_resolved.is_(True)),
        _count_where(Report.priority == PriorityLevel.CRITICAL),
        _count_where(Report.priority == PriorityLevel.HIGH),
        _count_where(Report.created_at >= recent_since),
    ).filter(Report.user_id == user_id).one()

    hours = [
        minutes / 60
        for minutes in (
            resolution_minutes(created, resolved_at)
            for created, resolved_at in db.query(Report.created_at, Report.resolved_at).filter(
                Report.user_id == user_id, Report.is_resolved.is_(True)
            )
        )
        if minutes is not None
    ]

    return UserReportStats(
        total_reports=total,
        resolved_reports=int(resolved),
        pending_reports=total - int(resolved),
        critical_reports=int(critical),
        high_priority_reports=int(high),
        reports_last_30_days=int(recent),
        avg_resolution_time_hours=round(sum(hours) / len(hours), 2) if hours else None,
    )
