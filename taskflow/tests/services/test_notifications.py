import logging
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskflow.crud.task import add_comment
from taskflow.models.notification import Notification
from taskflow.services.notifications import (
    build_task_notification_content,
    build_comment_notification_content,
    truncate_text,
    notify_task_event,
    notify_comment_event,
    notify_task_event_many,
    comment_recipients,
)


@pytest.mark.parametrize("event_type, title, message", [
    ("task_assigned", "New Task Assigned", 'You have been assigned a new task: "Ship it"'),
    ("task_updated", "Task Updated", 'Task "Ship it" has been updated'),
    ("task_completed", "Task Completed", 'Task "Ship it" has been marked as completed'),
    ("task_reassigned", "Task Reassigned", 'You have been assigned to task: "Ship it"'),
    ("something_else", "Task Notification", 'Task "Ship it" has been updated'),
])
def test_task_templates(event_type, title, message):
    assert build_task_notification_content(event_type, "Ship it") == (title, message)


def test_truncate_text():
    assert truncate_text("short", 50) == "short"
    assert truncate_text("x" * 50, 50) == "x" * 50
    assert truncate_text("x" * 51, 50) == "x" * 50 + "..."


def test_comment_template_truncates_long_text():
    title, message = build_comment_notification_content("Ship it", "a" * 60)
    assert title == "New Comment on Task"
    assert message == f'New comment on "Ship it": "{"a" * 50}..."'


def test_notify_task_event_creates_record(db: Session, task, member_user, manager_user):
    notification = notify_task_event(db, member_user.id, manager_user.id, task, "task_assigned")
    assert notification is not None
    assert notification.recipient_id == member_user.id
    assert notification.sender_id == manager_user.id
    assert notification.type == "task_assigned"
    assert notification.title == "New Task Assigned"
    assert notification.related_task_id == task.id
    assert notification.related_project_id == task.project_id
    assert notification.is_read is False


def test_self_notification_is_suppressed(db: Session, task, member_user):
    assert notify_task_event(db, member_user.id, member_user.id, task, "task_updated") is None
    assert notify_comment_event(db, member_user.id, member_user.id, task, "hello") is None
    assert db.query(Notification).count() == 0


def test_unknown_type_is_dropped(db: Session, task, member_user, manager_user, caplog):
    with caplog.at_level(logging.WARNING, logger="TaskFlow.Notifications"):
        assert notify_task_event(db, member_user.id, manager_user.id, task, "task_exploded") is None
    assert "unknown type" in caplog.text
    assert db.query(Notification).count() == 0


def test_task_without_project(db: Session, member_user, manager_user):
    loose_task = SimpleNamespace(id=None, title="Loose", project_id=None)
    notification = notify_task_event(db, member_user.id, manager_user.id, loose_task, "task_updated")
    assert notification.related_project_id is None
    assert notification.related_task_id is None


def test_notify_comment_event(db: Session, task, member_user, manager_user):
    notification = notify_comment_event(db, member_user.id, manager_user.id, task, "Looks good")
    assert notification.type == "comment_added"
    assert notification.message == f'New comment on "{task.title}": "Looks good"'


def test_fan_out_skips_sender(db: Session, task, member_user, manager_user, other_member):
    created = notify_task_event_many(
        db, [member_user.id, manager_user.id, other_member.id], manager_user.id, task, "task_updated"
    )
    assert sorted(n.recipient_id for n in created) == sorted([member_user.id, other_member.id])


def test_persistence_failure_is_swallowed(task, member_user, manager_user, caplog):
    db = MagicMock()
    with patch("taskflow.services.notifications.create_notification", side_effect=SQLAlchemyError("db down")):
        with caplog.at_level(logging.ERROR, logger="TaskFlow.Notifications"):
            assert notify_task_event(db, member_user.id, manager_user.id, task, "task_updated") is None
            assert notify_comment_event(db, member_user.id, manager_user.id, task, "hi") is None
    assert db.rollback.call_count == 2
    assert "db down" in caplog.text


def test_comment_recipients(db: Session, task, member_user, manager_user, other_member, admin_user):
    # assignee = member, creator = manager
    add_comment(db, task.id, member_user.id, "from assignee")
    add_comment(db, task.id, manager_user.id, "from creator")
    add_comment(db, task.id, other_member.id, "from outsider")

    assert comment_recipients(task, admin_user.id) == {member_user.id, manager_user.id, other_member.id}
    assert comment_recipients(task, other_member.id) == {member_user.id, manager_user.id}
