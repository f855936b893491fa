"""Report triage orchestration (proximity lookup + classification).

Bridges the storage layer and the pure priority classifier. A failing
proximity query never blocks report creation: the configured fallback
priority is used and the degradation is logged.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from civic_triage.config import PRIORITY_SETTINGS
from civic_triage.models.db.enums import PriorityLevel
from civic_triage.services.priority_classifier import classify_priority, severity_weight_for
from civic_triage.services.proximity import count_nearby_unresolved
from civic_triage.utils import get_logger

logger = get_logger(__name__)

AUTO_PRIORITY = "auto"


def assign_priority(
    db: Session,
    *,
    category: Optional[str],
    latitude: Optional[float],
    longitude: Optional[float],
    requested: Optional[str] = AUTO_PRIORITY,
) -> PriorityLevel:
    """Resolve the priority to persist with a new report.

    An explicit priority (anything other than ``auto``/empty) is kept as is;
    otherwise the nearby unresolved count feeds classify_priority.
    """
    if requested and requested != AUTO_PRIORITY:
        return PriorityLevel(requested)

    try:
        nearby = count_nearby_unresolved(db, latitude, longitude)
    except SQLAlchemyError as e:
        fallback = PriorityLevel(str(PRIORITY_SETTINGS["fallback_priority"]))
        logger.warning(
            "Priority auto-compute failed, falling back",
            error=str(e),
            category=category,
            fallback=fallback.value,
        )
        # Leave the session usable for the report insert that follows.
        db.rollback()
        return fallback

    priority = classify_priority(category, nearby)
    logger.info(
        "Auto-priority computed",
        category=category,
        nearby_count=nearby,
        severity_weight=severity_weight_for(category),
        priority=priority.value,
    )
    return priority


__all__ = ["assign_priority", "AUTO_PRIORITY"]
