"""Central Enum definitions for triage states and administrator roles.

These replace scattered string literals to ensure consistency across
DB models, schemas, and business logic.
"""
from __future__ import annotations
import enum


class PriorityLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(PriorityLevel).index(self)


class FraudSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AdminRole(str, enum.Enum):
    VIEWER = "viewer"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class RejectionReason(str, enum.Enum):
    INVALID_ROLE = "invalid_role"
    DEPARTMENT_REQUIRED = "department_required"
    ROLES_NOT_ALLOWED = "roles_not_allowed"
    ROLE_FILTER_NOT_PERMITTED = "role_filter_not_permitted"


__all__ = [
    "PriorityLevel",
    "FraudSeverity",
    "AdminRole",
    "RejectionReason",
]
