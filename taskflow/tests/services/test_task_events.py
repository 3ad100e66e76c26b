from sqlalchemy.orm import Session

from taskflow.crud.task import add_comment, delete_task, get_task, snapshot_task, update_task, update_task_status
from taskflow.models.activity_log import ActivityLog
from taskflow.models.notification import Notification
from taskflow.services import task_events


def _notifications(db: Session):
    return db.query(Notification).order_by(Notification.id).all()


def _last_activity(db: Session) -> ActivityLog:
    return db.query(ActivityLog).order_by(ActivityLog.id.desc()).first()


def test_created_notifies_assignee(db: Session, task, manager_user, member_user, project):
    sent = task_events.on_task_created(db, manager_user, task)
    assert [(n.recipient_id, n.type) for n in sent] == [(member_user.id, "task_assigned")]

    entry = _last_activity(db)
    assert entry.action == "task_assigned"
    assert entry.details["assignee_name"] == member_user.name
    assert entry.details["project_name"] == project.title
    assert entry.details["priority"] == "high"


def test_created_by_assignee_is_silent(db: Session, task, member_user):
    assert task_events.on_task_created(db, member_user, task) == []
    assert _notifications(db) == []


def test_reassignment_notifies_new_assignee(db: Session, task, manager_user, member_user, other_member):
    before = snapshot_task(task)
    task = update_task(db, task.id, {"assignee_id": other_member.id, "task_status": "completed"})
    sent = task_events.on_task_updated(db, manager_user, task, before, ["assignee_id", "task_status"])

    assert [(n.recipient_id, n.type) for n in sent] == [(other_member.id, "task_reassigned")]
    entry = _last_activity(db)
    assert entry.action == "task_reassigned"
    assert entry.details["old_assignee_name"] == member_user.name
    assert entry.details["new_assignee_name"] == other_member.name
    assert entry.description == f'Reassigned task "{task.title}" to {other_member.name}'


def test_completion_by_assignee_notifies_creator_once(db: Session, task, manager_user, member_user):
    before = snapshot_task(task)
    task = update_task_status(db, task.id, "completed")
    sent = task_events.on_task_status_changed(db, member_user, task, before)

    assert [(n.recipient_id, n.type) for n in sent] == [(manager_user.id, "task_completed")]
    assert len(_notifications(db)) == 1
    assert _last_activity(db).action == "task_completed"


def test_completion_by_creator_is_silent(db: Session, task, manager_user):
    before = snapshot_task(task)
    task = update_task_status(db, task.id, "completed")
    assert task_events.on_task_status_changed(db, manager_user, task, before) == []
    assert _last_activity(db).action == "task_completed"


def test_status_change_notifies_assignee(db: Session, task, manager_user, member_user):
    before = snapshot_task(task)
    task = update_task_status(db, task.id, "in-progress")
    sent = task_events.on_task_status_changed(db, manager_user, task, before)

    assert [(n.recipient_id, n.type) for n in sent] == [(member_user.id, "task_updated")]
    entry = _last_activity(db)
    assert entry.action == "task_status_changed"
    assert entry.details["old_status"] == "todo"
    assert entry.details["new_status"] == "in-progress"
    assert entry.description == f'Changed status of task "{task.title}" to in-progress'


def test_plain_update_by_assignee_is_silent(db: Session, task, member_user):
    before = snapshot_task(task)
    task = update_task(db, task.id, {"description": "More detail"})
    assert task_events.on_task_updated(db, member_user, task, before, ["description"]) == []
    entry = _last_activity(db)
    assert entry.action == "task_updated"
    assert entry.details["updated_fields"] == ["description"]


def test_comment_fan_out(db: Session, task, manager_user, member_user, other_member, admin_user):
    add_comment(db, task.id, member_user.id, "assignee here")
    add_comment(db, task.id, manager_user.id, "creator here")
    add_comment(db, task.id, other_member.id, "outsider here")

    comment = add_comment(db, task.id, admin_user.id, "admin chiming in")
    sent = task_events.on_comment_added(db, admin_user, task, comment)

    recipients = sorted(n.recipient_id for n in sent)
    assert recipients == sorted([member_user.id, manager_user.id, other_member.id])
    assert admin_user.id not in recipients
    assert all(n.type == "comment_added" for n in sent)

    entry = _last_activity(db)
    assert entry.action == "task_commented"
    assert entry.entity_type == "comment"
    assert entry.related_entity_id == task.id


def test_deleted_task_is_audited(db: Session, task, admin_user, project):
    task_ref = task_events.task_reference(get_task(db, task.id))
    delete_task(db, task.id)
    task_events.on_task_deleted(db, admin_user, task_ref)

    entry = _last_activity(db)
    assert entry.action == "task_deleted"
    assert entry.entity_name == task_ref.title
    assert entry.related_entity_name == project.title


def test_unchanged_status_is_silent(db: Session, task, manager_user):
    before = snapshot_task(task)
    task = update_task_status(db, task.id, "todo")
    assert task_events.on_task_status_changed(db, manager_user, task, before) == []
    assert _notifications(db) == []
    assert db.query(ActivityLog).count() == 0


def test_comment_audit_metadata(db: Session, task, member_user, other_member):
    comment = add_comment(db, task.id, other_member.id, "Twelve chars")
    task_events.on_comment_added(db, other_member, task, comment)

    entry = _last_activity(db)
    assert entry.details == {
        "comment_length": 12,
        "task_assignee": member_user.name,
        "task_status": "todo",
    }
