#tests/api/test_activity_log_api.py
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from taskflow.crud.activity_log import create_activity_log
from taskflow.models.activity_log import ActivityLog

def _entry(db: Session, user_id: int, action: str, entity_type: str = "task", days_ago: int = 0):
    return create_activity_log(db, {
        "user_id": user_id,
        "action": action,
        "description": f"{action} entry",
        "entity_type": entity_type,
        "entity_id": 1,
        "details": {"source": "test"},
        "created_at": datetime.now(timezone.utc) - timedelta(days=days_ago),
    })

@pytest.fixture
def trail(db: Session, member_user, manager_user):
    return [
        _entry(db, member_user.id, "task_created"),
        _entry(db, member_user.id, "task_updated"),
        _entry(db, manager_user.id, "project_created", entity_type="project"),
        _entry(db, manager_user.id, "task_deleted", days_ago=200),
    ]

def test_system_activity_admin_only(client: TestClient, member_headers, manager_headers, trail):
    assert client.get("/activity-logs/", headers=member_headers).status_code == 403
    assert client.get("/activity-logs/", headers=manager_headers).status_code == 403

def test_system_activity_list(client: TestClient, admin_headers, trail):
    response = client.get("/activity-logs/", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 4
    first = body["activities"][0]
    assert first["metadata"] == {"source": "test"}
    assert "details" not in first
    # the 200-day-old entry sorts last
    assert body["activities"][-1]["action"] == "task_deleted"

def test_system_activity_filters(client: TestClient, admin_headers, trail, manager_user):
    response = client.get("/activity-logs/", params={"user_id": manager_user.id}, headers=admin_headers)
    assert response.json()["pagination"]["total"] == 2

    response = client.get("/activity-logs/", params={"entity_type": "project"}, headers=admin_headers)
    assert [a["action"] for a in response.json()["activities"]] == ["project_created"]

    response = client.get("/activity-logs/", params={"action": "not_an_action"}, headers=admin_headers)
    assert response.status_code == 422

def test_my_activity(client: TestClient, member_headers, trail):
    response = client.get("/activity-logs/my-activity", headers=member_headers)
    assert response.status_code == 200
    actions = [a["action"] for a in response.json()["activities"]]
    assert sorted(actions) == ["task_created", "task_updated"]

def test_activity_stats(client: TestClient, admin_headers, trail):
    response = client.get("/activity-logs/stats", params={"group_by": "entity_type"}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    counts = {row["key"]: row["count"] for row in body["stats"]}
    assert counts == {"task": 3, "project": 1}
    assert body["summary"]["total_activities"] == 4
    assert body["summary"]["unique_users"] == 2
    assert body["summary"]["grouped_by"] == "entity_type"

def test_activity_stats_bad_group(client: TestClient, admin_headers):
    response = client.get("/activity-logs/stats", params={"group_by": "ip_address"}, headers=admin_headers)
    assert response.status_code == 400

def test_recent_activity(client: TestClient, manager_headers, member_headers, trail):
    assert client.get("/activity-logs/recent", headers=member_headers).status_code == 403
    response = client.get("/activity-logs/recent", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["count"] == 3

def test_cleanup(client: TestClient, admin_headers, trail, db: Session):
    response = client.request("DELETE", "/activity-logs/cleanup", json={"days_to_keep": 30}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["deleted_count"] == 1
    assert body["message"] == "Cleaned up activity logs older than 30 days"
    assert db.query(ActivityLog).count() == 3

def test_cleanup_default_retention(client: TestClient, admin_headers, trail):
    response = client.delete("/activity-logs/cleanup", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Cleaned up activity logs older than 90 days"
    assert response.json()["deleted_count"] == 1

def test_cleanup_negative_days(client: TestClient, admin_headers):
    response = client.request("DELETE", "/activity-logs/cleanup", json={"days_to_keep": -1}, headers=admin_headers)
    assert response.status_code == 422
