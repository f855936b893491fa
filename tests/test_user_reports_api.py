from fastapi.testclient import TestClient
from civic_triage.models.db.enums import PriorityLevel

USER_ID = 42


def test_user_reports_most_recent_first(client: TestClient, report_factory, hours_ago):
    oldest = report_factory(user_id=USER_ID, created_at=hours_ago(72))
    newest = report_factory(user_id=USER_ID, created_at=hours_ago(1))
    middle = report_factory(user_id=USER_ID, created_at=hours_ago(24))
    report_factory(user_id=USER_ID + 1)

    r = client.get(f"/api/v1/users/{USER_ID}/reports")
    assert r.status_code == 200, r.text
    data = r.json()
    assert [item["id"] for item in data["reports"]] == [newest.id, middle.id, oldest.id]
    assert data["pagination"]["total"] == 3
    assert data["pagination"]["has_more"] is False

    page = client.get(f"/api/v1/users/{USER_ID}/reports", params={"limit": 2, "offset": 0}).json()
    assert [item["id"] for item in page["reports"]] == [newest.id, middle.id]
    assert page["pagination"]["has_more"] is True


def test_user_reports_filters(client: TestClient, report_factory):
    pothole = report_factory(user_id=USER_ID, priority=PriorityLevel.CRITICAL)
    fixed = report_factory(user_id=USER_ID, is_resolved=True, category="Water Supply & Sewerage")
    report_factory(user_id=USER_ID, priority=PriorityLevel.LOW)

    resolved = client.get(f"/api/v1/users/{USER_ID}/reports", params={"is_resolved": "true"}).json()
    assert [item["id"] for item in resolved["reports"]] == [fixed.id]

    by_category = client.get(
        f"/api/v1/users/{USER_ID}/reports", params={"category": "Water Supply & Sewerage"}
    ).json()
    assert [item["id"] for item in by_category["reports"]] == [fixed.id]

    critical = client.get(f"/api/v1/users/{USER_ID}/reports", params={"priority": "critical"}).json()
    assert [item["id"] for item in critical["reports"]] == [pothole.id]

    bad = client.get(f"/api/v1/users/{USER_ID}/reports", params={"priority": "urgent"})
    assert bad.status_code == 422


def test_user_reports_empty(client: TestClient):
    data = client.get(f"/api/v1/users/{USER_ID}/reports").json()
    assert data["reports"] == []
    assert data["pagination"]["total"] == 0


def test_user_report_stats(client: TestClient, report_factory, hours_ago):
    report_factory(user_id=USER_ID, priority=PriorityLevel.CRITICAL, created_at=hours_ago(24 * 40))
    report_factory(user_id=USER_ID, priority=PriorityLevel.HIGH, created_at=hours_ago(10),
                   is_resolved=True, resolved_at=hours_ago(7))   # 3 h
    report_factory(user_id=USER_ID, priority=PriorityLevel.HIGH, created_at=hours_ago(20),
                   is_resolved=True, resolved_at=hours_ago(12))  # 8 h
    report_factory(user_id=USER_ID + 1, priority=PriorityLevel.CRITICAL)

    r = client.get(f"/api/v1/users/{USER_ID}/reports/stats")
    assert r.status_code == 200, r.text
    assert r.json() == {
        "total_reports": 3,
        "resolved_reports": 2,
        "pending_reports": 1,
        "critical_reports": 1,
        "high_priority_reports": 2,
        "reports_last_30_days": 2,
        "avg_resolution_time_hours": 5.5,
    }


def test_user_report_stats_without_reports(client: TestClient):
    data = client.get(f"/api/v1/users/{USER_ID}/reports/stats").json()
    assert data["total_reports"] == 0
    assert data["pending_reports"] == 0
    assert data["avg_resolution_time_hours"] is None
