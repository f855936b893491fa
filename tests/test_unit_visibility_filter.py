from datetime import datetime, timezone
from types import SimpleNamespace
import pytest
from civic_triage.services.visibility_filter import (
    AdminIdentity, Rejection, ScopeRequest, VisibilityScope,
    order_by_role_rank, role_rank, scope_for_identity, scope_visibility,
)
from civic_triage.models.db.enums import AdminRole, RejectionReason


def test_viewer_pinned_to_own_department():
    scope = scope_visibility("viewer", "Roads")
    assert isinstance(scope, VisibilityScope)
    assert scope.role == AdminRole.VIEWER
    assert scope.allowed_department_filter == "Roads"
    assert scope.can_view_all_departments is False
    assert scope.can_filter_by_role is False
    assert scope.allowed_roles == ("viewer",)
    assert scope.role_filter == ("viewer",)


def test_viewer_requested_department_is_ignored():
    scope = scope_visibility("viewer", "Roads", ScopeRequest(department_filter="Water"))
    assert isinstance(scope, VisibilityScope)
    assert scope.allowed_department_filter == "Roads"


@pytest.mark.parametrize("department", [None, "", "   "])
def test_viewer_without_department_rejected(department):
    result = scope_visibility("viewer", department, ScopeRequest())
    assert isinstance(result, Rejection)
    assert result.reason == RejectionReason.DEPARTMENT_REQUIRED
    assert "department required" in result.message


def test_admin_sees_all_departments_and_may_filter():
    unfiltered = scope_visibility("admin", "Roads")
    assert isinstance(unfiltered, VisibilityScope)
    assert unfiltered.allowed_department_filter is None
    assert unfiltered.can_view_all_departments is True
    assert unfiltered.role_filter == ("viewer",)

    filtered = scope_visibility("admin", None, ScopeRequest(department_filter=" Water "))
    assert isinstance(filtered, VisibilityScope)
    assert filtered.allowed_department_filter == "Water"


def test_admin_cannot_request_super_admin():
    result = scope_visibility("admin", None, ScopeRequest(role_filter=["super_admin"]))
    assert isinstance(result, Rejection)
    assert result.reason == RejectionReason.ROLES_NOT_ALLOWED
    assert result.invalid_roles == ("super_admin",)
    assert result.message == "Invalid roles requested: super_admin. Allowed roles: viewer"


def test_admin_role_filter_within_allowed_set_still_not_permitted():
    result = scope_visibility("admin", None, ScopeRequest(role_filter=["viewer"]))
    assert isinstance(result, Rejection)
    assert result.reason == RejectionReason.ROLE_FILTER_NOT_PERMITTED


def test_super_admin_role_filter():
    scope = scope_visibility("super_admin", None, ScopeRequest(role_filter=["Admin", "viewer", "admin"]))
    assert isinstance(scope, VisibilityScope)
    assert scope.role_filter == ("admin", "viewer")
    assert scope.allowed_roles == ("viewer", "admin", "super_admin")

    everyone = scope_visibility(AdminRole.SUPER_ADMIN, None, ScopeRequest(role_filter=[]))
    assert isinstance(everyone, VisibilityScope)
    assert everyone.role_filter == ("viewer", "admin", "super_admin")


def test_super_admin_unknown_role_in_filter_rejected():
    result = scope_visibility("super_admin", None, ScopeRequest(role_filter=["janitor", "viewer"]))
    assert isinstance(result, Rejection)
    assert result.reason == RejectionReason.ROLES_NOT_ALLOWED
    assert result.invalid_roles == ("janitor",)


@pytest.mark.parametrize("role", ["janitor", "", None])
def test_unknown_requester_role_rejected(role):
    result = scope_visibility(role, "Roads")
    assert isinstance(result, Rejection)
    assert result.reason == RejectionReason.INVALID_ROLE


def test_scope_is_idempotent():
    identity = AdminIdentity(role="viewer", department="Roads")
    request = ScopeRequest(department_filter="Water")
    assert scope_for_identity(identity, request) == scope_for_identity(identity, request)


def test_role_rank_and_ordering():
    assert role_rank("super_admin") == 1
    assert role_rank("ADMIN") == 2
    assert role_rank(AdminRole.VIEWER) == 3
    assert role_rank("legacy") == 4

    t = lambda day: datetime(2025, 1, day, tzinfo=timezone.utc)  # noqa: E731
    rows = [
        SimpleNamespace(name="v-old", role="viewer", created_at=t(1)),
        SimpleNamespace(name="x", role="legacy", created_at=t(9)),
        SimpleNamespace(name="a", role="admin", created_at=t(2)),
        SimpleNamespace(name="v-new", role="viewer", created_at=t(5)),
        SimpleNamespace(name="s", role="super_admin", created_at=t(3)),
        SimpleNamespace(name="v-undated", role="viewer", created_at=None),
    ]
    ordered = [r.name for r in order_by_role_rank(rows)]
    assert ordered == ["s", "a", "v-new", "v-old", "v-undated", "x"]
