"""Role-scoped visibility for report and administrator listings.

Given an already-authenticated administrator identity (role + department)
and the filters it requested, decide which constraints the storage layer
must apply. Returns either a VisibilityScope or a Rejection; callers branch
on ``Rejection.reason`` to produce distinct user-facing messages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar, Union

from civic_triage.config import ROLE_HIERARCHY, ROLE_RANKS, UNRANKED_ROLE
from civic_triage.models.db.enums import AdminRole, RejectionReason
from civic_triage.utils.time import as_utc

T = TypeVar("T")


@dataclass(frozen=True)
class AdminIdentity:
    role: str
    department: Optional[str] = None


@dataclass(frozen=True)
class ScopeRequest:
    department_filter: Optional[str] = None
    role_filter: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class VisibilityScope:
    role: AdminRole
    allowed_department_filter: Optional[str]
    can_filter_by_department: bool
    can_filter_by_role: bool
    allowed_roles: tuple[str, ...]
    role_filter: tuple[str, ...] = field(default=())

    @property
    def can_view_all_departments(self) -> bool:
        return self.can_filter_by_department


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str
    invalid_roles: tuple[str, ...] = ()


ScopeResult = Union[VisibilityScope, Rejection]


def _normalize_role(role: Any) -> str:
    if isinstance(role, AdminRole):
        return role.value
    return str(role or "").strip().lower()


def _clean_department(department: Optional[str]) -> Optional[str]:
    if department is None:
        return None
    cleaned = department.strip()
    return cleaned or None


def scope_visibility(
    role: Union[str, AdminRole, None],
    department: Optional[str],
    requested: Optional[ScopeRequest] = None,
) -> ScopeResult:
    """Derive the listing constraints for an administrator identity.

    Rejections, in order of evaluation:
      * unknown requester role -> INVALID_ROLE
      * viewer without department -> DEPARTMENT_REQUIRED
      * requested roles outside the allowed set -> ROLES_NOT_ALLOWED
      * any role filter while role filtering is not permitted -> ROLE_FILTER_NOT_PERMITTED
    """
    requested = requested or ScopeRequest()
    role_key = _normalize_role(role)
    hierarchy = ROLE_HIERARCHY.get(role_key)
    if hierarchy is None:
        return Rejection(
            reason=RejectionReason.INVALID_ROLE,
            message="Invalid requester role or insufficient permissions",
        )
    allowed_roles, can_filter_by_role, can_filter_by_department = hierarchy
    admin_role = AdminRole(role_key)
    own_department = _clean_department(department)

    if admin_role is AdminRole.VIEWER and own_department is None:
        return Rejection(
            reason=RejectionReason.DEPARTMENT_REQUIRED,
            message="Viewer admin must have a department assigned (department required)",
        )

    role_filter: tuple[str, ...] = allowed_roles
    if requested.role_filter is not None:
        requested_roles = tuple(dict.fromkeys(_normalize_role(r) for r in requested.role_filter))
        invalid = tuple(r for r in requested_roles if r not in allowed_roles)
        if invalid:
            return Rejection(
                reason=RejectionReason.ROLES_NOT_ALLOWED,
                message=(
                    f"Invalid roles requested: {', '.join(invalid)}. "
                    f"Allowed roles: {', '.join(allowed_roles)}"
                ),
                invalid_roles=invalid,
            )
        if not can_filter_by_role:
            return Rejection(
                reason=RejectionReason.ROLE_FILTER_NOT_PERMITTED,
                message="You don't have permission to filter by specific roles",
            )
        role_filter = requested_roles or allowed_roles

    if can_filter_by_department:
        department_filter = _clean_department(requested.department_filter)
    else:
        # Implicitly pinned to the viewer's own department; requested filter ignored.
        department_filter = own_department

    return VisibilityScope(
        role=admin_role,
        allowed_department_filter=department_filter,
        can_filter_by_department=can_filter_by_department,
        can_filter_by_role=can_filter_by_role,
        allowed_roles=allowed_roles,
        role_filter=role_filter,
    )


def scope_for_identity(identity: AdminIdentity, requested: Optional[ScopeRequest] = None) -> ScopeResult:
    return scope_visibility(identity.role, identity.department, requested)


def role_rank(role: Any) -> int:
    """Presentation rank: super_admin=1, admin=2, viewer=3, anything else=4."""
    return ROLE_RANKS.get(_normalize_role(role), UNRANKED_ROLE)


def order_by_role_rank(
    records: Iterable[T],
    *,
    role_of: Callable[[T], Any] = lambda r: getattr(r, "role"),
    created_at_of: Callable[[T], Any] = lambda r: getattr(r, "created_at"),
) -> list[T]:
    """Order records by role rank ascending, then most recent first.

    Records without a usable timestamp sort after dated ones of the same rank.
    """
    def recency(record: T) -> float:
        ts: Optional[datetime] = as_utc(created_at_of(record))
        return -ts.timestamp() if ts is not None else float("inf")

    return sorted(records, key=lambda r: (role_rank(role_of(r)), recency(r)))


__all__ = [
    "AdminIdentity",
    "ScopeRequest",
    "VisibilityScope",
    "Rejection",
    "ScopeResult",
    "scope_visibility",
    "scope_for_identity",
    "role_rank",
    "order_by_role_rank",
]
