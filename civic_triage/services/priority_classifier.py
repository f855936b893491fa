"""Priority classification for newly submitted reports.

Takes the report category and the number of nearby unresolved reports
(supplied by the storage layer) and returns an urgency label. Pure
arithmetic over static tables; never raises on caller data.
"""
from __future__ import annotations

from civic_triage.config import PRIORITY_SETTINGS, SEVERITY_TIERS
from civic_triage.models.db.enums import PriorityLevel
from civic_triage.utils.metrics import non_negative

_TIER_LOOKUP: dict[str, int] = {
    category.strip().casefold(): weight
    for weight, categories in SEVERITY_TIERS
    for category in categories
}


def severity_weight_for(category: str | None) -> int:
    """Return the severity tier weight (3, 2 or default 1) for a category label."""
    key = (category or "").strip().casefold()
    return _TIER_LOOKUP.get(key, int(PRIORITY_SETTINGS["default_weight"]))


def priority_for_score(score: int) -> PriorityLevel:
    if score >= int(PRIORITY_SETTINGS["critical_min_score"]):
        return PriorityLevel.CRITICAL
    if score >= int(PRIORITY_SETTINGS["high_min_score"]):
        return PriorityLevel.HIGH
    if score >= int(PRIORITY_SETTINGS["medium_min_score"]):
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW


def classify_priority(category: str | None, nearby_unresolved_count: int) -> PriorityLevel:
    """Classify a report's urgency.

    Args:
        category: free-form category label
        nearby_unresolved_count: unresolved reports within the proximity window
            (0 when the report has no coordinates; negatives count as 0)
    Returns:
        PriorityLevel derived from count * category weight.
    """
    score = non_negative(nearby_unresolved_count) * severity_weight_for(category)
    return priority_for_score(score)


__all__ = ["classify_priority", "severity_weight_for", "priority_for_score"]
