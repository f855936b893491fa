"""
Administrator endpoints: profile, role-scoped report listing, and
role-filtered administrator listing / creation.
"""
import time
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from civic_triage.api.deps import (
    get_db, get_active_admin, get_admin_identity, get_pagination_params, raise_for_rejection
)
from civic_triage.config import ROLE_RANKS, UNRANKED_ROLE
from civic_triage.models.db import Admin, Report
from civic_triage.models.db.enums import PriorityLevel
from civic_triage.models.schemas import (
    AdminCreate, AdminRead, AdminList, AdminListMeta,
    AdminReportRead, AdminReportList, AdminInfo, PaginationMeta, ReportRead,
    FraudAssessmentRead,
)
from civic_triage.services.fraud_scorer import assess_fraud
from civic_triage.services.visibility_filter import (
    AdminIdentity, Rejection, ScopeRequest, scope_for_identity
)
from civic_triage.utils import get_logger, log_business_event, log_performance

router = APIRouter()
logger = get_logger(__name__)

def _role_rank_expression():
    """SQL CASE mirroring role_rank(): super_admin=1, admin=2, viewer=3, else 4."""
    role = func.lower(Admin.role)
    return case(
        *[(role == name, rank) for name, rank in ROLE_RANKS.items()],
        else_=UNRANKED_ROLE,
    )

@router.get(
    "/{admin_id}",
    response_model=AdminRead,
    summary="Get admin profile"
)
async def get_admin_profile(admin: Admin = Depends(get_active_admin)) -> AdminRead:
    return AdminRead.model_validate(admin)

@router.get(
    "/{admin_id}/reports",
    response_model=AdminReportList,
    summary="List reports visible to an admin",
    description="Viewers see only their own department; admins and super admins see all and may filter by department"
)
async def list_admin_reports(
    admin_id: int,
    request: Request,
    identity: AdminIdentity = Depends(get_admin_identity),
    is_resolved: Optional[bool] = Query(None, description="Filter by resolution state"),
    category: Optional[str] = Query(None),
    priority: Optional[PriorityLevel] = Query(None),
    department: Optional[str] = Query(None, description="Ignored for viewers"),
    pagination: dict = Depends(get_pagination_params),
    db: Session = Depends(get_db)
) -> AdminReportList:
    start_time = time.time()
    request_id = getattr(request.state, "request_id", "unknown")

    scope = scope_for_identity(identity, ScopeRequest(department_filter=department))
    if isinstance(scope, Rejection):
        raise_for_rejection(scope, admin_id=admin_id, request_id=request_id)

    if department and not scope.can_filter_by_department:
        logger.debug(
            "Department filter ignored for department-scoped admin",
            admin_id=admin_id,
            requested_department=department,
            request_id=request_id
        )

    query = db.query(Report).options(selectinload(Report.engagement))
    if scope.allowed_department_filter:
        query = query.filter(func.lower(Report.department) == scope.allowed_department_filter.lower())
    if is_resolved is not None:
        query = query.filter(Report.is_resolved == is_resolved)
    if category:
        query = query.filter(Report.category == category)
    if priority:
        query = query.filter(Report.priority == priority)

    total = query.order_by(None).count()
    reports = (
        query.order_by(Report.created_at.desc(), Report.id.desc())
        .offset(pagination["offset"])
        .limit(pagination["limit"])
        .all()
    )

    items: List[AdminReportRead] = []
    for report in reports:
        assessment = assess_fraud(report.title, report.description, report.created_at, report.engagement)
        items.append(AdminReportRead(
            **ReportRead.model_validate(report).model_dump(),
            fraud=FraudAssessmentRead.model_validate(assessment),
        ))

    log_performance(
        operation="list_admin_reports",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"report_count": len(items), "role": scope.role.value}
    )

    return AdminReportList(
        message=f"Reports fetched successfully for {scope.role.value}",
        reports=items,
        pagination=PaginationMeta(
            total=total,
            limit=pagination["limit"],
            offset=pagination["offset"],
            has_more=(pagination["offset"] + pagination["limit"]) < total,
        ),
        admin_info=AdminInfo(
            role=scope.role.value,
            department=identity.department,
            can_view_all_departments=scope.can_view_all_departments,
        ),
    )

@router.get(
    "/{admin_id}/admins",
    response_model=AdminList,
    summary="List administrators visible to an admin",
    description="Ordered by role rank (super_admin, admin, viewer) then most recent; only super admins may filter by role"
)
async def list_admins(
    admin_id: int,
    request: Request,
    identity: AdminIdentity = Depends(get_admin_identity),
    roles: Optional[List[str]] = Query(None, description="Requested role filter"),
    db: Session = Depends(get_db)
) -> AdminList:
    request_id = getattr(request.state, "request_id", "unknown")

    scope = scope_for_identity(identity, ScopeRequest(role_filter=roles))
    if isinstance(scope, Rejection):
        raise_for_rejection(scope, admin_id=admin_id, request_id=request_id)

    admins = (
        db.query(Admin)
        .filter(Admin.is_active == True, func.lower(Admin.role).in_(scope.role_filter))
        .order_by(_role_rank_expression(), Admin.created_at.desc(), Admin.id.desc())
        .all()
    )

    logger.info(
        "Admins retrieved",
        admin_id=admin_id,
        requester_role=scope.role.value,
        filtered_roles=list(scope.role_filter),
        count=len(admins),
        request_id=request_id
    )

    return AdminList(
        message=f"Admins retrieved successfully for {scope.role.value}",
        admins=[AdminRead.model_validate(a) for a in admins],
        meta=AdminListMeta(
            requester_role=scope.role.value,
            requested_roles=roles,
            filtered_roles=list(scope.role_filter),
            allowed_roles=list(scope.allowed_roles),
            can_filter_by_role=scope.can_filter_by_role,
            total_count=len(admins),
        ),
    )

@router.post(
    "/{admin_id}/admins",
    response_model=AdminRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create administrator",
    description="Admins may create viewers; super admins may create any role"
)
async def create_admin(
    admin_id: int,
    admin_data: AdminCreate,
    request: Request,
    identity: AdminIdentity = Depends(get_admin_identity),
    db: Session = Depends(get_db)
) -> AdminRead:
    request_id = getattr(request.state, "request_id", "unknown")

    scope = scope_for_identity(identity)
    if isinstance(scope, Rejection):
        raise_for_rejection(scope, admin_id=admin_id, request_id=request_id)
    # Viewers are read-only; everyone else manages the roles they can list.
    if not scope.can_view_all_departments or admin_data.role.value not in scope.allowed_roles:
        logger.warning(
            "Admin creation denied: role outside requester hierarchy",
            admin_id=admin_id,
            requester_role=scope.role.value,
            requested_role=admin_data.role.value,
            request_id=request_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{admin_data.role.value}' cannot be created by {scope.role.value}"
        )

    email = admin_data.email.lower()
    if db.query(Admin).filter(func.lower(Admin.email) == email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Admin with email '{email}' already exists"
        )

    try:
        new_admin = Admin(
            email=email,
            full_name=admin_data.full_name,
            role=admin_data.role.value,
            department=admin_data.department,
        )
        db.add(new_admin)
        db.commit()
        db.refresh(new_admin)
    except IntegrityError as e:
        db.rollback()
        logger.error("Admin creation failed: database integrity error", error=str(e), request_id=request_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Admin with this email already exists"
        )

    log_business_event(
        event_type="admin_created",
        details={
            "new_admin_id": new_admin.id,
            "role": new_admin.role,
            "department": new_admin.department,
        },
        admin_id=admin_id,
        request_id=request_id
    )

    return AdminRead.model_validate(new_admin)
