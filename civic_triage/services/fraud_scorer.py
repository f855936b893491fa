"""Fraud risk scoring for reports.

Each factor inspects the report's engagement counters or content and, when
its trigger holds, adds a fixed number of points and a human readable
reason. Reasons are appended in evaluation order so the admin UI and tests
see a stable sequence.

Public entrypoint: assess_fraud(...)

Design principles:
- Pure function (no side effects) except reading configuration.
- Total over caller data: missing engagement means all-zero, negative or
  non-numeric counters are treated as zero, unparseable dates skip the
  age-based factor.
- Paired factors (engagement rate, growth vs age) are if/elif chains so the
  stronger condition suppresses the weaker one.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from civic_triage.config import (
    FRAUD_SCORING,
    FRAUD_SEVERITY_BANDS,
    NO_FRAUD_RECOMMENDATION,
    SPAM_PATTERNS,
)
from civic_triage.models.db.enums import FraudSeverity
from civic_triage.utils.metrics import non_negative, safe_div
from civic_triage.utils.time import as_utc, hours_between, utc_now


@dataclass(frozen=True)
class EngagementSnapshot:
    view_count: int = 0
    upvotes: int = 0
    downvotes: int = 0
    comment_count: int = 0
    share_count: int = 0

    def __post_init__(self):
        # Counters arrive from other subsystems; negatives and junk read as zero.
        for f in fields(self):
            object.__setattr__(self, f.name, non_negative(getattr(self, f.name)))

    @classmethod
    def from_source(cls, source: Union["EngagementSnapshot", Mapping[str, Any], Any, None]) -> "EngagementSnapshot":
        """Build a normalized snapshot from a mapping, ORM row, or None."""
        if source is None:
            return cls()
        if isinstance(source, Mapping):
            get = source.get
        else:
            def get(name: str, default: Any = 0) -> Any:
                return getattr(source, name, default)
        return cls(**{f.name: get(f.name, 0) for f in fields(cls)})


@dataclass(frozen=True)
class FraudAssessment:
    score: int
    severity: Optional[FraudSeverity]
    is_fraud: bool
    reasons: List[str] = field(default_factory=list)
    recommendation: str = NO_FRAUD_RECOMMENDATION

    @property
    def flagged(self) -> bool:
        """True when the score earns a badge (severity surfaced)."""
        return self.severity is not None


def _cfg(key: str) -> float:
    return float(FRAUD_SCORING[key])


def _pct(ratio: float, digits: int = 0) -> str:
    return f"{ratio * 100:.{digits}f}"


def _band_for(score: int) -> tuple[Optional[FraudSeverity], bool, str]:
    for min_score, severity, is_fraud, recommendation in FRAUD_SEVERITY_BANDS:
        if score >= min_score:
            return FraudSeverity(severity), is_fraud, recommendation
    return None, False, NO_FRAUD_RECOMMENDATION


def _has_spam(*texts: str) -> bool:
    return any(pattern.search(text) for pattern in SPAM_PATTERNS for text in texts)


def assess_fraud(
    title: Optional[str],
    description: Optional[str],
    created_at: datetime | str | None,
    engagement: Union[EngagementSnapshot, Mapping[str, Any], Any, None] = None,
    *,
    now: Optional[datetime] = None,
) -> FraudAssessment:
    """Score a report for fraud risk.

    Args:
        title / description: report content (None treated as empty)
        created_at: report creation timestamp (aware, naive-UTC, or ISO string)
        engagement: EngagementSnapshot, mapping or ORM row; None means all zero
        now: reference time for the age factor (defaults to current UTC time)
    Returns:
        FraudAssessment with score, severity (None below the lowest band),
        is_fraud flag, ordered reasons and recommendation.
    """
    stats = engagement if isinstance(engagement, EngagementSnapshot) else EngagementSnapshot.from_source(engagement)
    views = stats.view_count
    likes = stats.upvotes
    dislikes = stats.downvotes
    comments = stats.comment_count
    shares = stats.share_count
    votes = likes + dislikes

    reasons: List[str] = []
    score = 0

    # Factor 1: dislike ratio
    if votes > _cfg("min_votes_for_ratio"):
        dislike_ratio = safe_div(dislikes, votes)
        if dislike_ratio > _cfg("high_dislike_ratio"):
            score += int(_cfg("high_dislike_points"))
            reasons.append(f"High dislike ratio: {_pct(dislike_ratio)}% of votes are negative")
        elif dislike_ratio > _cfg("concerning_dislike_ratio"):
            score += int(_cfg("concerning_dislike_points"))
            reasons.append(f"Concerning dislike ratio: {_pct(dislike_ratio)}% of votes are negative")

    # Factor 2: low engagement despite views
    if views > _cfg("min_views_for_engagement"):
        engagement_rate = safe_div(votes + comments, views)
        if engagement_rate < _cfg("very_low_engagement_rate") and views > _cfg("very_low_engagement_views"):
            score += int(_cfg("very_low_engagement_points"))
            reasons.append(
                f"Very low engagement rate: {_pct(engagement_rate, 2)}% (high views with minimal interaction)"
            )
        elif engagement_rate < _cfg("low_engagement_rate"):
            score += int(_cfg("low_engagement_points"))
            reasons.append(f"Low engagement rate: {_pct(engagement_rate, 2)}%")

    # Factor 3: views per like
    if views > _cfg("min_views_for_view_pattern") and likes > 0:
        views_per_like = safe_div(views, likes)
        if views_per_like > _cfg("max_views_per_like"):
            score += int(_cfg("view_pattern_points"))
            reasons.append(f"Suspicious view pattern: {views_per_like:.0f} views per like (possible bot views)")

    # Factor 4: growth vs report age
    created = as_utc(created_at)
    if created is not None:
        age_hours = hours_between(created, as_utc(now) or utc_now())
        if age_hours < _cfg("viral_max_age_hours") and views > _cfg("viral_min_views"):
            score += int(_cfg("viral_points"))
            reasons.append(
                f"Abnormal viral growth: {views} views in {age_hours:.1f} hours (possible bot campaign)"
            )
        elif age_hours < _cfg("rapid_max_age_hours") and views > _cfg("rapid_min_views"):
            score += int(_cfg("rapid_points"))
            reasons.append(f"Suspicious rapid growth: {views} views in {age_hours:.1f} hours")

    # Factor 5: overwhelming negative feedback
    if dislikes > _cfg("negative_min_downvotes") and likes < _cfg("negative_max_upvotes"):
        score += int(_cfg("negative_points"))
        reasons.append(f"Overwhelming negative feedback: {dislikes} dislikes vs {likes} likes")

    # Factor 6: votes without discussion
    if votes > _cfg("no_discussion_min_votes") and comments == 0 and views > _cfg("no_discussion_min_views"):
        score += int(_cfg("no_discussion_points"))
        reasons.append("No organic discussion: High votes but zero comments (possible bot activity)")

    # Factor 7: shares without engagement
    if (
        shares > _cfg("sharing_min_shares")
        and votes < _cfg("sharing_max_votes")
        and comments < _cfg("sharing_max_comments")
    ):
        score += int(_cfg("sharing_points"))
        reasons.append(f"Suspicious sharing pattern: {shares} shares with minimal genuine engagement")

    title_text = title or ""
    description_text = description or ""

    # Factor 8: spam keywords / patterns
    if _has_spam(title_text, description_text):
        score += int(_cfg("spam_points"))
        reasons.append("Content contains spam-like keywords or patterns")

    # Factor 9: very brief content
    if len(title_text) < _cfg("min_title_length") or len(description_text) < _cfg("min_description_length"):
        score += int(_cfg("low_quality_points"))
        reasons.append("Low-quality content: Very brief title or description")

    severity, is_fraud, recommendation = _band_for(score)
    return FraudAssessment(
        score=score,
        severity=severity,
        is_fraud=is_fraud,
        reasons=reasons,
        recommendation=recommendation,
    )


__all__ = ["EngagementSnapshot", "FraudAssessment", "assess_fraud"]
