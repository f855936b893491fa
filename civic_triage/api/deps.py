"""
Dependencies for database sessions, administrator identity, visibility
rejections and pagination.
"""
import logging
from typing import Generator, NoReturn
from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from civic_triage.config import PAGINATION_SETTINGS
from civic_triage.database import SessionLocal
from civic_triage.models.db import Admin, Report
from civic_triage.services.visibility_filter import AdminIdentity, Rejection
from civic_triage.utils import get_logger, log_business_event

logger = get_logger(__name__)

def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    Ensures proper session lifecycle management with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()

def get_active_admin(admin_id: int, db: Session = Depends(get_db)) -> Admin:
    """
    Load the requesting administrator.

    Authentication happens upstream; this only checks the record exists and
    is active.

    Raises:
        HTTPException: 404 if the admin does not exist or is inactive
    """
    admin = db.query(Admin).filter(
        Admin.id == admin_id,
        Admin.is_active == True
    ).first()

    if not admin:
        logger.warning("Admin lookup failed: not found or inactive", admin_id=admin_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Admin not found or inactive"
        )

    return admin

def get_admin_identity(admin: Admin = Depends(get_active_admin)) -> AdminIdentity:
    """Project the admin record onto the identity the visibility filter consumes."""
    return AdminIdentity(role=(admin.role or "").lower(), department=admin.department)

def get_report_or_404(report_id: int, db: Session = Depends(get_db)) -> Report:
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        logger.warning("Report not found", report_id=report_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Report not found"
        )
    return report

def raise_for_rejection(
    rejection: Rejection,
    *,
    admin_id: int | None = None,
    request_id: str | None = None,
) -> NoReturn:
    """
    Surface a visibility rejection as an authorization error.

    The response detail carries the machine-checkable reason so clients can
    distinguish a missing department from a disallowed role filter.
    """
    log_business_event(
        event_type="scope_rejected",
        details={
            "reason": rejection.reason.value,
            "invalid_roles": list(rejection.invalid_roles) or None,
        },
        admin_id=admin_id,
        request_id=request_id,
        level=logging.WARNING,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "reason": rejection.reason.value,
            "message": rejection.message,
            "invalid_roles": list(rejection.invalid_roles),
        },
    )

def get_pagination_params(
    limit: int = Query(PAGINATION_SETTINGS["default_limit"]),
    offset: int = Query(0),
) -> dict:
    """
    Validate and return pagination parameters.

    Args:
        limit: Maximum number of items to return (1-max_limit)
        offset: Number of items to skip (>= 0)

    Raises:
        HTTPException: If parameters are invalid
    """
    max_limit = PAGINATION_SETTINGS["max_limit"]
    if limit < 1 or limit > max_limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Limit must be between 1 and {max_limit}"
        )

    if offset < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Offset must be >= 0"
        )

    return {"limit": limit, "offset": offset}
