"""Triage engine: priority classification, fraud scoring, visibility scoping."""
from .priority_classifier import classify_priority, severity_weight_for
from .fraud_scorer import EngagementSnapshot, FraudAssessment, assess_fraud
from .visibility_filter import (
    AdminIdentity,
    ScopeRequest,
    VisibilityScope,
    Rejection,
    scope_visibility,
    scope_for_identity,
    role_rank,
    order_by_role_rank,
)

__all__ = [
    "classify_priority",
    "severity_weight_for",
    "EngagementSnapshot",
    "FraudAssessment",
    "assess_fraud",
    "AdminIdentity",
    "ScopeRequest",
    "VisibilityScope",
    "Rejection",
    "scope_visibility",
    "scope_for_identity",
    "role_rank",
    "order_by_role_rank",
]
