from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from civic_triage.models.db.enums import AdminRole


def test_viewer_sees_only_own_department(client: TestClient, admin_factory, report_factory):
    viewer = admin_factory(AdminRole.VIEWER, "Roads")
    report_factory(department="Roads", title="Pothole near the market square")
    report_factory(department="roads", title="Cracked pavement on 5th avenue")
    report_factory(department="Water")

    r = client.get(f"/api/v1/admins/{viewer.id}/reports", params={"department": "Water"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["pagination"]["total"] == 2
    assert {item["department"].lower() for item in body["reports"]} == {"roads"}
    assert body["admin_info"] == {"role": "viewer", "department": "Roads", "can_view_all_departments": False}
    assert body["message"] == "Reports fetched successfully for viewer"
    assert "fraud" in body["reports"][0]


def test_viewer_without_department_rejected(client: TestClient, admin_factory, report_factory):
    viewer = admin_factory(AdminRole.VIEWER, None)
    report_factory()

    r = client.get(f"/api/v1/admins/{viewer.id}/reports")
    assert r.status_code == 403
    body = r.json()
    assert body["success"] is False
    assert body["reason"] == "department_required"
    assert "department required" in body["message"]


def test_unknown_admin_role_rejected(client: TestClient, admin_factory):
    legacy = admin_factory("moderator", "Roads")
    r = client.get(f"/api/v1/admins/{legacy.id}/reports")
    assert r.status_code == 403
    assert r.json()["reason"] == "invalid_role"


def test_unknown_admin_404(client: TestClient):
    r = client.get("/api/v1/admins/424242/reports")
    assert r.status_code == 404


def test_admin_filters_by_department(client: TestClient, admin_factory, report_factory):
    admin = admin_factory(AdminRole.ADMIN, None)
    report_factory(department="Roads")
    report_factory(department="Water")
    report_factory(department="Water", is_resolved=True)

    everything = client.get(f"/api/v1/admins/{admin.id}/reports").json()
    assert everything["pagination"]["total"] == 3
    assert everything["admin_info"]["can_view_all_departments"] is True

    water = client.get(f"/api/v1/admins/{admin.id}/reports", params={"department": "water"}).json()
    assert water["pagination"]["total"] == 2

    open_water = client.get(
        f"/api/v1/admins/{admin.id}/reports", params={"department": "Water", "is_resolved": "false"}
    ).json()
    assert open_water["pagination"]["total"] == 1


def test_report_listing_pagination(client: TestClient, admin_factory, report_factory):
    admin = admin_factory(AdminRole.SUPER_ADMIN, None)
    base = datetime.now(timezone.utc) - timedelta(days=1)
    for i in range(5):
        report_factory(title=f"Broken streetlight number {i}", created_at=base + timedelta(minutes=i))

    page = client.get(f"/api/v1/admins/{admin.id}/reports", params={"limit": 2, "offset": 0}).json()
    assert page["pagination"] == {"total": 5, "limit": 2, "offset": 0, "has_more": True}
    assert [r["title"] for r in page["reports"]] == ["Broken streetlight number 4", "Broken streetlight number 3"]

    last = client.get(f"/api/v1/admins/{admin.id}/reports", params={"limit": 2, "offset": 4}).json()
    assert last["pagination"]["has_more"] is False
    assert len(last["reports"]) == 1

    bad = client.get(f"/api/v1/admins/{admin.id}/reports", params={"limit": 0})
    assert bad.status_code == 400


def test_report_listing_carries_fraud_badge(client: TestClient, admin_factory, report_factory):
    admin = admin_factory(AdminRole.ADMIN, None)
    report_factory(
        created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        engagement={"view_count": 200, "upvotes": 1, "downvotes": 15, "comment_count": 0, "share_count": 0},
    )
    body = client.get(f"/api/v1/admins/{admin.id}/reports").json()
    fraud = body["reports"][0]["fraud"]
    assert fraud["severity"] == "critical"
    assert fraud["is_fraud"] is True


def test_super_admin_lists_admins_by_rank(client: TestClient, admin_factory):
    now = datetime.now(timezone.utc)
    viewer_old = admin_factory(AdminRole.VIEWER, "Roads", created_at=now - timedelta(days=3))
    viewer_new = admin_factory(AdminRole.VIEWER, "Water", created_at=now - timedelta(days=1))
    admin = admin_factory(AdminRole.ADMIN, None, created_at=now - timedelta(days=2))
    super_admin = admin_factory(AdminRole.SUPER_ADMIN, None, created_at=now - timedelta(days=5))
    admin_factory(AdminRole.VIEWER, "Parks", is_active=False)

    r = client.get(f"/api/v1/admins/{super_admin.id}/admins")
    assert r.status_code == 200, r.text
    body = r.json()
    assert [a["id"] for a in body["admins"]] == [super_admin.id, admin.id, viewer_new.id, viewer_old.id]
    assert body["meta"]["can_filter_by_role"] is True
    assert body["meta"]["total_count"] == 4

    filtered = client.get(f"/api/v1/admins/{super_admin.id}/admins", params={"roles": ["admin", "super_admin"]}).json()
    assert [a["id"] for a in filtered["admins"]] == [super_admin.id, admin.id]
    assert filtered["meta"]["filtered_roles"] == ["admin", "super_admin"]


def test_admin_lists_viewers_only(client: TestClient, admin_factory):
    admin = admin_factory(AdminRole.ADMIN, None)
    viewer = admin_factory(AdminRole.VIEWER, "Roads")
    admin_factory(AdminRole.SUPER_ADMIN, None)

    body = client.get(f"/api/v1/admins/{admin.id}/admins").json()
    assert [a["id"] for a in body["admins"]] == [viewer.id]
    assert body["meta"]["allowed_roles"] == ["viewer"]

    r = client.get(f"/api/v1/admins/{admin.id}/admins", params={"roles": ["super_admin"]})
    assert r.status_code == 403
    assert r.json()["reason"] == "roles_not_allowed"
    assert r.json()["invalid_roles"] == ["super_admin"]

    r = client.get(f"/api/v1/admins/{admin.id}/admins", params={"roles": ["viewer"]})
    assert r.status_code == 403
    assert r.json()["reason"] == "role_filter_not_permitted"


def test_viewer_lists_viewers(client: TestClient, admin_factory):
    viewer = admin_factory(AdminRole.VIEWER, "Roads")
    admin_factory(AdminRole.ADMIN, None)
    body = client.get(f"/api/v1/admins/{viewer.id}/admins").json()
    assert [a["role"] for a in body["admins"]] == ["viewer"]


def test_admin_creation_hierarchy(client: TestClient, admin_factory):
    admin = admin_factory(AdminRole.ADMIN, None)
    super_admin = admin_factory(AdminRole.SUPER_ADMIN, None)
    viewer = admin_factory(AdminRole.VIEWER, "Roads")

    new_viewer = {"email": "desk@city.gov", "full_name": "Desk Viewer", "role": "viewer", "department": "Parks"}
    r = client.post(f"/api/v1/admins/{admin.id}/admins", json=new_viewer)
    assert r.status_code == 201, r.text
    assert r.json()["department"] == "Parks"

    dup = client.post(f"/api/v1/admins/{super_admin.id}/admins", json=new_viewer)
    assert dup.status_code == 409

    promote = {"email": "boss@city.gov", "full_name": "Boss", "role": "admin"}
    assert client.post(f"/api/v1/admins/{admin.id}/admins", json=promote).status_code == 403
    assert client.post(f"/api/v1/admins/{super_admin.id}/admins", json=promote).status_code == 201

    other_viewer = {"email": "v2@city.gov", "full_name": "V2", "role": "viewer", "department": "Roads"}
    assert client.post(f"/api/v1/admins/{viewer.id}/admins", json=other_viewer).status_code == 403


def test_viewer_creation_requires_department(client: TestClient, admin_factory):
    super_admin = admin_factory(AdminRole.SUPER_ADMIN, None)
    r = client.post(
        f"/api/v1/admins/{super_admin.id}/admins",
        json={"email": "nodept@city.gov", "full_name": "No Dept", "role": "viewer"},
    )
    assert r.status_code == 422


def test_admin_profile(client: TestClient, admin_factory):
    admin = admin_factory(AdminRole.ADMIN, "Roads")
    r = client.get(f"/api/v1/admins/{admin.id}")
    assert r.status_code == 200
    assert r.json()["role"] == "admin"
