"""
Report endpoints: creation with automatic priority, the nearby feed,
community statistics, engagement updates, fraud assessment and resolution.
"""
import time
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from civic_triage.api.deps import get_db, get_report_or_404, raise_for_rejection
from civic_triage.config import DEFAULT_DEPARTMENT, NEARBY_FEED_SETTINGS
from civic_triage.models.db import Admin, Report, ReportEngagement
from civic_triage.models.schemas import (
    ReportCreate, ReportRead, ReportResolve,
    EngagementUpdate, FraudAssessmentRead, FraudAssessmentResponse,
    NearbyReport, NearbyPagination, NearbyReportList, CommunityStats,
)
from civic_triage.services.fraud_scorer import EngagementSnapshot, assess_fraud
from civic_triage.services.proximity import find_nearby_reports
from civic_triage.services.triage import assign_priority
from civic_triage.services.visibility_filter import Rejection, scope_visibility
from civic_triage.utils import get_logger, log_business_event, log_performance
from civic_triage.utils.metrics import safe_div
from civic_triage.utils.time import as_utc, minutes_between, resolution_minutes, utc_now

router = APIRouter()
logger = get_logger(__name__)

@router.post(
    "/",
    response_model=ReportRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a report",
    description="Create a citizen report; priority 'auto' derives urgency from nearby unresolved reports and category"
)
async def create_report(
    report_data: ReportCreate,
    request: Request,
    db: Session = Depends(get_db)
) -> ReportRead:
    start_time = time.time()
    request_id = getattr(request.state, "request_id", "unknown")

    logger.info(
        "Report creation started",
        user_id=report_data.user_id,
        category=report_data.category,
        has_coordinates=report_data.latitude is not None,
        requested_priority=report_data.priority,
        request_id=request_id
    )

    # Never blocks creation: assign_priority falls back on storage errors.
    priority = assign_priority(
        db,
        category=report_data.category,
        latitude=report_data.latitude,
        longitude=report_data.longitude,
        requested=report_data.priority,
    )

    try:
        report = Report(
            user_id=report_data.user_id,
            title=report_data.title,
            description=report_data.description or "",
            category=report_data.category,
            priority=priority,
            latitude=report_data.latitude,
            longitude=report_data.longitude,
            address=report_data.address or "",
            department=(report_data.department or "").strip() or DEFAULT_DEPARTMENT,
        )
        db.add(report)
        db.commit()
        db.refresh(report)
    except IntegrityError as e:
        db.rollback()
        logger.error(
            "Report creation failed: database integrity error",
            error=str(e),
            user_id=report_data.user_id,
            request_id=request_id
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Report violates storage constraints"
        )

    log_business_event(
        event_type="report_created",
        details={
            "report_id": report.id,
            "user_id": report.user_id,
            "category": report.category,
            "department": report.department,
            "priority": report.priority.value,
        },
        request_id=request_id
    )

    log_performance(
        operation="create_report",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"report_id": report.id, "priority": report.priority.value}
    )

    return ReportRead.model_validate(report)

@router.get(
    "/nearby",
    response_model=NearbyReportList,
    summary="List reports near a point",
    description="Reports (resolved or not) within radius_km, nearest first then most recent"
)
async def list_nearby_reports(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(NEARBY_FEED_SETTINGS["default_radius_km"], gt=0, le=NEARBY_FEED_SETTINGS["max_radius_km"]),
    limit: int = Query(int(NEARBY_FEED_SETTINGS["default_limit"]), ge=1, le=int(NEARBY_FEED_SETTINGS["max_limit"])),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
) -> NearbyReportList:
    start_time = time.time()
    matches = find_nearby_reports(db, latitude, longitude, radius_km * 1000, limit=limit, offset=offset)

    reports = [
        NearbyReport(**ReportRead.model_validate(report).model_dump(), distance_km=round(meters / 1000, 2))
        for report, meters in matches
    ]

    log_performance(
        operation="list_nearby_reports",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={
            "radius_km": radius_km,
            "result_count": len(reports),
            "request_id": getattr(request.state, "request_id", None),
        }
    )

    return NearbyReportList(
        reports=reports,
        pagination=NearbyPagination(limit=limit, offset=offset, radius_km=radius_km),
    )

@router.get(
    "/stats/community",
    response_model=CommunityStats,
    summary="Community resolution statistics"
)
async def get_community_stats(db: Session = Depends(get_db)) -> CommunityStats:
    total, resolved = db.query(
        func.count(Report.id),
        func.coalesce(func.sum(case((Report.is_resolved.is_(True), 1), else_=0)), 0),
    ).one()

    resolution_days = [
        minutes / (60 * 24)
        for minutes in (
            resolution_minutes(created, resolved_at)
            for created, resolved_at in db.query(Report.created_at, Report.resolved_at).filter(
                Report.is_resolved.is_(True), Report.resolved_at.is_not(None)
            )
        )
        if minutes is not None
    ]

    return CommunityStats(
        total_reports=total,
        resolved_reports=int(resolved),
        resolution_rate=round(safe_div(resolved, total) * 100, 1),
        avg_resolution_time_days=round(sum(resolution_days) / len(resolution_days), 1) if resolution_days else None,
    )

@router.get(
    "/{report_id}",
    response_model=ReportRead,
    summary="Get report"
)
async def get_report(report: Report = Depends(get_report_or_404)) -> ReportRead:
    return ReportRead.model_validate(report)

@router.put(
    "/{report_id}/engagement",
    response_model=EngagementUpdate,
    summary="Store engagement counters",
    description="Replace the community engagement snapshot for a report"
)
async def update_engagement(
    payload: EngagementUpdate,
    report: Report = Depends(get_report_or_404),
    db: Session = Depends(get_db)
) -> EngagementUpdate:
    engagement = report.engagement
    if engagement is None:
        engagement = ReportEngagement(report_id=report.id)
        db.add(engagement)
    for field_name, value in payload.model_dump().items():
        setattr(engagement, field_name, value)
    db.commit()
    db.refresh(engagement)

    logger.info("Engagement snapshot stored", report_id=report.id, view_count=engagement.view_count)
    return EngagementUpdate.model_validate(engagement)

@router.get(
    "/{report_id}/fraud-assessment",
    response_model=FraudAssessmentResponse,
    summary="Assess fraud risk",
    description="Score the report's engagement signals and content; reports without engagement data score as all-zero"
)
async def get_fraud_assessment(report: Report = Depends(get_report_or_404)) -> FraudAssessmentResponse:
    snapshot = EngagementSnapshot.from_source(report.engagement)
    assessment = assess_fraud(report.title, report.description, report.created_at, snapshot)

    if assessment.is_fraud:
        logger.warning(
            "Report flagged as likely fraud",
            report_id=report.id,
            score=assessment.score,
            severity=assessment.severity.value if assessment.severity else None
        )

    return FraudAssessmentResponse(
        report_id=report.id,
        engagement=EngagementUpdate.model_validate(snapshot),
        assessment=FraudAssessmentRead.model_validate(assessment),
    )

@router.post(
    "/{report_id}/resolve",
    response_model=ReportRead,
    summary="Resolve report",
    description="Mark a report resolved by an active administrator"
)
async def resolve_report(
    payload: ReportResolve,
    request: Request,
    report: Report = Depends(get_report_or_404),
    db: Session = Depends(get_db)
) -> ReportRead:
    request_id = getattr(request.state, "request_id", "unknown")

    admin = db.query(Admin).filter(Admin.id == payload.admin_id, Admin.is_active == True).first()
    if not admin:
        logger.warning("Resolve denied: admin not found or inactive", admin_id=payload.admin_id, request_id=request_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin not found or inactive"
        )

    scope = scope_visibility(admin.role, admin.department)
    if isinstance(scope, Rejection):
        raise_for_rejection(scope, admin_id=admin.id, request_id=request_id)
    if not scope.can_filter_by_department and (report.department or "").lower() != (scope.allowed_department_filter or "").lower():
        logger.warning(
            "Resolve denied: report outside viewer department",
            admin_id=admin.id,
            report_id=report.id,
            report_department=report.department,
            request_id=request_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Report is outside your department"
        )

    if report.is_resolved:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Report is already resolved"
        )

    resolved_at = utc_now()
    report.is_resolved = True
    report.resolved_at = resolved_at
    report.resolution_notes = payload.resolution_notes
    report.resolved_by_admin_id = admin.id
    created = as_utc(report.created_at)
    report.time_taken_to_resolve = minutes_between(created, resolved_at) if created else None
    db.commit()
    db.refresh(report)

    log_business_event(
        event_type="report_resolved",
        details={
            "report_id": report.id,
            "minutes_to_resolve": report.time_taken_to_resolve,
        },
        admin_id=admin.id,
        request_id=request_id
    )

    return ReportRead.model_validate(report)
