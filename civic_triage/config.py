"""Core application configuration & triage rule tables.

All business rules that may evolve (category severity tiers, priority
thresholds, fraud factor points, spam patterns, role hierarchy, pagination
bounds) are centralized here so they can be adjusted without diving into
service logic. The rule tables are immutable (frozensets, tuples and
read-only mappings) and loaded once at import; only deployment settings are
read from the environment.
"""
from __future__ import annotations

import os
import re
from types import MappingProxyType
from typing import Final, Mapping

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./civic_triage.db")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str | None = os.getenv("LOG_FILE", "logs/app.log") or None

CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ------------------------------- Proximity -------------------------------- #
# Window used by the storage layer when counting nearby unresolved reports.
PROXIMITY_SETTINGS: Mapping[str, float] = MappingProxyType({
	"radius_meters": float(os.getenv("PROXIMITY_RADIUS_METERS", "500")),
	"window_days": float(os.getenv("PROXIMITY_WINDOW_DAYS", "30")),
	"earth_radius_meters": 6_371_000.0,
})

# ---------------------------- Priority Classifier -------------------------- #
HIGH_SEVERITY_CATEGORIES: Final[frozenset[str]] = frozenset({
	"Public Safety & Emergency",
	"Water Supply & Sewerage",
	"Traffic & Transport",
	"Municipal Urban Planning & Encroachment Removal",
})

MEDIUM_SEVERITY_CATEGORIES: Final[frozenset[str]] = frozenset({
	"Street Lighting & Electrical",
	"Roads & Infrastructure",
	"Public Health & Hygiene",
})

# Tier weight → categories. Anything not listed falls back to default_weight.
SEVERITY_TIERS: Final[tuple[tuple[int, frozenset[str]], ...]] = (
	(3, HIGH_SEVERITY_CATEGORIES),
	(2, MEDIUM_SEVERITY_CATEGORIES),
)

PRIORITY_SETTINGS: Mapping[str, int | str] = MappingProxyType({
	"default_weight": 1,
	# Inclusive lower bounds on nearby_count * weight.
	"critical_min_score": 15,
	"high_min_score": 8,
	"medium_min_score": 3,
	# Used by the caller when the proximity count cannot be computed.
	"fallback_priority": "medium",
})

# ---------------------------- Fraud Risk Scorer ---------------------------- #
FRAUD_SCORING: Mapping[str, float | int] = MappingProxyType({
	# Factor 1: dislike ratio
	"min_votes_for_ratio": 5,
	"high_dislike_ratio": 0.7,
	"high_dislike_points": 35,
	"concerning_dislike_ratio": 0.5,
	"concerning_dislike_points": 20,
	# Factor 2: engagement rate
	"min_views_for_engagement": 50,
	"very_low_engagement_views": 100,
	"very_low_engagement_rate": 0.02,
	"very_low_engagement_points": 25,
	"low_engagement_rate": 0.05,
	"low_engagement_points": 15,
	# Factor 3: views per like
	"min_views_for_view_pattern": 20,
	"max_views_per_like": 100,
	"view_pattern_points": 15,
	# Factor 4: growth vs report age (hours)
	"viral_max_age_hours": 2,
	"viral_min_views": 500,
	"viral_points": 30,
	"rapid_max_age_hours": 6,
	"rapid_min_views": 1000,
	"rapid_points": 25,
	# Factor 5: overwhelming negative feedback
	"negative_min_downvotes": 10,
	"negative_max_upvotes": 3,
	"negative_points": 30,
	# Factor 6: votes without discussion
	"no_discussion_min_votes": 30,
	"no_discussion_min_views": 100,
	"no_discussion_points": 20,
	# Factor 7: shares without engagement
	"sharing_min_shares": 10,
	"sharing_max_votes": 5,
	"sharing_max_comments": 2,
	"sharing_points": 20,
	# Factor 8/9: content heuristics
	"spam_points": 25,
	"min_title_length": 10,
	"min_description_length": 20,
	"low_quality_points": 10,
})

SPAM_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
	re.compile(r"click here", re.IGNORECASE),
	re.compile(r"free money", re.IGNORECASE),
	re.compile(r"100% guarantee", re.IGNORECASE),
	re.compile(r"act now", re.IGNORECASE),
	re.compile(r"limited time", re.IGNORECASE),
	re.compile(r"congratulations", re.IGNORECASE),
	re.compile(r"you've won", re.IGNORECASE),
	re.compile(r"!!!+"),
	re.compile(r"\$\$\$+"),
)

# Inclusive lower bounds, most severe first: (min_score, severity, is_fraud, recommendation)
FRAUD_SEVERITY_BANDS: Final[tuple[tuple[int, str, bool, str], ...]] = (
	(70, "critical", True,
	 "IMMEDIATE ACTION REQUIRED: Strong indicators of fraudulent activity. "
	 "Consider removing this report and investigating the user."),
	(50, "high", True,
	 "HIGH PRIORITY: Multiple fraud indicators detected. Review carefully and consider removal."),
	(30, "medium", True,
	 "MODERATE CONCERN: Some suspicious patterns detected. Monitor closely and verify authenticity."),
	(15, "low", False,
	 "LOW PRIORITY: Minor concerns detected. Keep an eye on engagement patterns."),
)

NO_FRAUD_RECOMMENDATION: Final[str] = "No significant fraud indicators detected."

# --------------------------- Visibility / Roles ---------------------------- #
# Requester role → (roles it may list, may it filter by role, may it filter by department)
ROLE_HIERARCHY: Mapping[str, tuple[tuple[str, ...], bool, bool]] = MappingProxyType({
	"viewer": (("viewer",), False, False),
	"admin": (("viewer",), False, True),
	"super_admin": (("viewer", "admin", "super_admin"), True, True),
})

# Presentation ordering for admin listings (ascending).
ROLE_RANKS: Mapping[str, int] = MappingProxyType({
	"super_admin": 1,
	"admin": 2,
	"viewer": 3,
})
UNRANKED_ROLE: Final[int] = 4

PAGINATION_SETTINGS: Mapping[str, int] = MappingProxyType({
	"default_limit": 50,
	"max_limit": 500,
})

# ------------------------------ Nearby feed -------------------------------- #
NEARBY_FEED_SETTINGS: Mapping[str, float] = MappingProxyType({
	"default_radius_km": 10.0,
	"max_radius_km": 100.0,
	"default_limit": 20,
	"max_limit": 100,
})

# Window for the "reports in the last N days" user statistic.
USER_STATS_RECENT_DAYS: Final[int] = 30

DEFAULT_DEPARTMENT: Final[str] = "General"

__all__ = [
	"DATABASE_URL",
	"LOG_LEVEL",
	"LOG_FILE",
	"CORS_ORIGINS",
	# Rule groups
	"PROXIMITY_SETTINGS",
	"HIGH_SEVERITY_CATEGORIES",
	"MEDIUM_SEVERITY_CATEGORIES",
	"SEVERITY_TIERS",
	"PRIORITY_SETTINGS",
	"FRAUD_SCORING",
	"SPAM_PATTERNS",
	"FRAUD_SEVERITY_BANDS",
	"NO_FRAUD_RECOMMENDATION",
	"ROLE_HIERARCHY",
	"ROLE_RANKS",
	"UNRANKED_ROLE",
	"PAGINATION_SETTINGS",
	"DEFAULT_DEPARTMENT",
	"NEARBY_FEED_SETTINGS",
	"USER_STATS_RECENT_DAYS",
]
