#tests/api/test_task_api.py
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from taskflow.models.activity_log import ActivityLog
from taskflow.models.notification import Notification
from taskflow.models.task import Task as TaskModel

def _payload(assignee_id: int, project_id=None, **extra) -> dict:
    data = {
        "title": "Prepare release notes",
        "description": "Summarize changes for 1.2",
        "assignee_id": assignee_id,
        "project_id": project_id,
        "priority": "high",
        "due_date": "2030-06-30",
    }
    data.update(extra)
    return data

def _notifications_for(db: Session, user_id: int):
    return db.query(Notification).filter(Notification.recipient_id == user_id).order_by(Notification.id).all()

# --- POST /tasks/ ---

def test_create_task_notifies_assignee(client: TestClient, manager_headers, member_user, project, db: Session):
    response = client.post("/tasks/", json=_payload(member_user.id, project.id), headers=manager_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["task_status"] == "todo"
    assert data["completed_at"] is None
    assert data["assignee"]["id"] == member_user.id

    notes = _notifications_for(db, member_user.id)
    assert len(notes) == 1
    assert notes[0].type == "task_assigned"
    assert notes[0].message == 'You have been assigned a new task: "Prepare release notes"'
    assert notes[0].related_project_id == project.id

    entry = db.query(ActivityLog).filter(ActivityLog.entity_id == data["id"], ActivityLog.entity_type == "task").one()
    assert entry.action == "task_assigned"
    assert entry.related_entity_name == project.title

def test_create_task_member_forbidden(client: TestClient, member_headers, member_user):
    response = client.post("/tasks/", json=_payload(member_user.id), headers=member_headers)
    assert response.status_code == 403

def test_create_task_unknown_assignee(client: TestClient, manager_headers):
    response = client.post("/tasks/", json=_payload(99999), headers=manager_headers)
    assert response.status_code == 404

def test_create_task_invalid_priority(client: TestClient, manager_headers, member_user):
    response = client.post("/tasks/", json=_payload(member_user.id, priority="urgent"), headers=manager_headers)
    assert response.status_code == 422

# --- GET /tasks/ ---

def test_list_tasks_paginated(client: TestClient, manager_headers, member_user, db: Session):
    for i in range(3):
        client.post("/tasks/", json=_payload(member_user.id, title=f"Task {i}"), headers=manager_headers)
    response = client.get("/tasks/", params={"limit": 2, "page": 1, "assignee_id": member_user.id}, headers=manager_headers)
    assert response.status_code == 200
    body = response.json()
    assert len(body["tasks"]) == 2
    assert body["pagination"] == {
        "current_page": 1, "total_pages": 2, "total": 3, "has_next": True, "has_prev": False,
    }

def test_my_tasks_and_stats(client: TestClient, member_headers, task):
    response = client.get("/tasks/my-tasks", headers=member_headers)
    assert [t["id"] for t in response.json()] == [task.id]

    stats = client.get("/tasks/stats/overview", headers=member_headers).json()
    assert stats["by_status"]["todo"] >= 1

def test_get_task_not_found(client: TestClient, member_headers):
    assert client.get("/tasks/424242", headers=member_headers).status_code == 404

# --- PUT /tasks/{id} and PATCH /tasks/{id}/status ---

def test_reassign_notifies_new_assignee_only(client: TestClient, manager_headers, task, member_user, other_member, db: Session):
    response = client.put(f"/tasks/{task.id}", json={"assignee_id": other_member.id}, headers=manager_headers)
    assert response.status_code == 200
    assert [n.type for n in _notifications_for(db, other_member.id)] == ["task_reassigned"]
    assert _notifications_for(db, member_user.id) == []

def test_status_patch_by_assignee_notifies_creator(client: TestClient, member_headers, task, manager_user, db: Session):
    response = client.patch(f"/tasks/{task.id}/status", json={"task_status": "completed"}, headers=member_headers)
    assert response.status_code == 200
    assert response.json()["completed_at"] is not None

    notes = _notifications_for(db, manager_user.id)
    assert [n.type for n in notes] == ["task_completed"]
    assert notes[0].title == "Task Completed"

def test_status_patch_invalid_value(client: TestClient, member_headers, task):
    response = client.patch(f"/tasks/{task.id}/status", json={"task_status": "done"}, headers=member_headers)
    assert response.status_code == 422

def test_completed_at_lifecycle(client: TestClient, manager_headers, task):
    seen = []
    for new_status in ("in-progress", "completed", "todo"):
        body = client.put(f"/tasks/{task.id}", json={"task_status": new_status}, headers=manager_headers).json()
        seen.append((body["task_status"], body["completed_at"] is not None))
    assert seen == [("in-progress", False), ("completed", True), ("todo", False)]

def test_update_by_member_forbidden(client: TestClient, member_headers, task):
    response = client.put(f"/tasks/{task.id}", json={"title": "Mine now"}, headers=member_headers)
    assert response.status_code == 403

# --- DELETE /tasks/{id} ---

def test_delete_task_admin_only(client: TestClient, manager_headers, admin_headers, task, db: Session):
    assert client.delete(f"/tasks/{task.id}", headers=manager_headers).status_code == 403
    task_id = task.id
    response = client.delete(f"/tasks/{task_id}", headers=admin_headers)
    assert response.status_code == 200
    assert db.query(TaskModel).filter(TaskModel.id == task_id).first() is None
    entry = db.query(ActivityLog).filter(ActivityLog.action == "task_deleted").one()
    assert entry.entity_id == task_id

# --- Comments ---

def test_comment_flow(client: TestClient, task, member_user, manager_user, other_member, token_headers, db: Session):
    other_headers = token_headers(other_member)
    member_headers = token_headers(member_user)

    response = client.post(f"/tasks/{task.id}/comments", json={"text": "Any updates?"}, headers=other_headers)
    assert response.status_code == 201
    comment_id = response.json()["id"]

    # outsider's comment reaches assignee and creator
    assert [n.type for n in _notifications_for(db, member_user.id)] == ["comment_added"]
    assert [n.type for n in _notifications_for(db, manager_user.id)] == ["comment_added"]
    assert _notifications_for(db, other_member.id) == []

    listing = client.get(f"/tasks/{task.id}/comments", headers=member_headers).json()
    assert listing["task_title"] == task.title
    assert listing["count"] == 1

    denied = client.put(f"/tasks/{task.id}/comments/{comment_id}", json={"text": "edited"}, headers=member_headers)
    assert denied.status_code == 403

    edited = client.put(f"/tasks/{task.id}/comments/{comment_id}", json={"text": "edited"}, headers=other_headers)
    assert edited.status_code == 200
    assert edited.json()["text"] == "edited"

    deleted = client.delete(f"/tasks/{task.id}/comments/{comment_id}", headers=other_headers)
    assert deleted.status_code == 200

    actions = [a.action for a in db.query(ActivityLog).filter(ActivityLog.entity_type == "comment").order_by(ActivityLog.id)]
    assert actions == ["task_commented", "comment_updated", "comment_deleted"]

def test_comment_on_missing_task(client: TestClient, member_headers):
    response = client.post("/tasks/99999/comments", json={"text": "hello"}, headers=member_headers)
    assert response.status_code == 404

# --- End to end ---

def test_create_comment_complete_scenario(client: TestClient, manager_user, member_user, token_headers, db: Session):
    manager_headers = token_headers(manager_user)
    member_headers = token_headers(member_user)

    created = client.post("/tasks/", json=_payload(member_user.id, title="E2E task"), headers=manager_headers).json()
    task_id = created["id"]

    client.post(f"/tasks/{task_id}/comments", json={"text": "Starting now"}, headers=member_headers)
    client.patch(f"/tasks/{task_id}/status", json={"task_status": "completed"}, headers=member_headers)

    member_notes = [n.type for n in _notifications_for(db, member_user.id)]
    manager_notes = [n.type for n in _notifications_for(db, manager_user.id)]
    assert member_notes == ["task_assigned"]
    assert manager_notes == ["comment_added", "task_completed"]

    task_entries = [
        a.action for a in db.query(ActivityLog)
        .filter(ActivityLog.entity_type.in_(["task", "comment"]))
        .order_by(ActivityLog.id)
    ]
    assert task_entries == ["task_assigned", "task_commented", "task_completed"]

def test_status_patch_to_same_status_is_silent(client: TestClient, manager_headers, task, member_user, db: Session):
    response = client.patch(f"/tasks/{task.id}/status", json={"task_status": "todo"}, headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["task_status"] == "todo"
    assert _notifications_for(db, member_user.id) == []
    assert db.query(ActivityLog).filter(ActivityLog.entity_type == "task").count() == 0
