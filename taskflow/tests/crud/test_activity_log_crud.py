import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from taskflow.crud.activity_log import (
    create_activity_log,
    get_user_activity,
    get_system_activity,
    count_activity,
    get_activity_stats,
    get_recent_activity,
    cleanup_old_activity,
)
from taskflow.core.exceptions import ActivityLogValidationError


def _entry(db: Session, user, action="task_updated", entity_type="task", days_ago=0, **extra):
    data = {
        "user_id": user.id,
        "action": action,
        "description": f"{action} entry",
        "entity_type": entity_type,
        "created_at": datetime.now(timezone.utc) - timedelta(days=days_ago),
    }
    data.update(extra)
    return create_activity_log(db, data)


def test_create_activity_log_defaults_metadata(db: Session, member_user):
    entry = create_activity_log(db, {"user_id": member_user.id, "action": "user_login", "description": "login"})
    assert entry.id is not None
    assert entry.details == {}
    assert entry.created_at is not None


def test_user_activity_is_newest_first_and_paginated(db: Session, member_user, manager_user):
    for days in (3, 1, 2, 0):
        _entry(db, member_user, days_ago=days)
    _entry(db, manager_user)

    page = get_user_activity(db, member_user.id, skip=0, limit=3)
    assert len(page) == 3
    stamps = [e.created_at for e in page]
    assert stamps == sorted(stamps, reverse=True)
    assert all(e.user_id == member_user.id for e in page)
    assert count_activity(db, user_id=member_user.id) == 4

    rest = get_user_activity(db, member_user.id, skip=3, limit=3)
    assert len(rest) == 1


def test_filters_apply_to_list_and_count(db: Session, member_user, manager_user):
    _entry(db, member_user, action="project_created", entity_type="project", days_ago=10)
    _entry(db, member_user, action="project_updated", entity_type="project", days_ago=1)
    _entry(db, manager_user, action="task_created", entity_type="task", days_ago=1)

    filters = {"entity_type": "project", "start_date": datetime.now(timezone.utc) - timedelta(days=5)}
    entries = get_system_activity(db, filters)
    assert [e.action for e in entries] == ["project_updated"]
    assert count_activity(db, filters) == len(entries)

    by_user = get_system_activity(db, {"user_id": manager_user.id})
    assert [e.action for e in by_user] == ["task_created"]
    assert count_activity(db, {"action": "task_created"}) == 1


def test_end_date_filter(db: Session, member_user):
    _entry(db, member_user, days_ago=10)
    _entry(db, member_user, days_ago=0)
    filters = {"end_date": datetime.now(timezone.utc) - timedelta(days=5)}
    assert count_activity(db, filters, user_id=member_user.id) == 1


def test_stats_grouped_by_action(db: Session, member_user, manager_user):
    _entry(db, member_user, action="task_updated")
    _entry(db, member_user, action="task_updated")
    _entry(db, manager_user, action="task_updated")
    _entry(db, manager_user, action="project_created", entity_type="project")

    result = get_activity_stats(db, "action")
    assert result["stats"][0]["key"] == "task_updated"
    assert result["stats"][0]["count"] == 3
    assert result["stats"][0]["latest_activity"] is not None
    counts = [g["count"] for g in result["stats"]]
    assert counts == sorted(counts, reverse=True)
    assert result["total_activities"] == 4
    assert result["unique_users"] == 2


def test_stats_grouped_by_user(db: Session, member_user, manager_user):
    _entry(db, member_user)
    _entry(db, manager_user)
    _entry(db, manager_user)
    result = get_activity_stats(db, "user_id")
    assert result["stats"][0] == {
        "key": manager_user.id,
        "count": 2,
        "latest_activity": result["stats"][0]["latest_activity"],
    }


def test_stats_rejects_unknown_grouping(db: Session):
    with pytest.raises(ActivityLogValidationError):
        get_activity_stats(db, "ip_address")


def test_recent_activity_last_day(db: Session, member_user):
    _entry(db, member_user, days_ago=2)
    fresh = _entry(db, member_user, days_ago=0)
    assert [e.id for e in get_recent_activity(db, hours=24)] == [fresh.id]


def test_cleanup_old_activity(db: Session, member_user):
    _entry(db, member_user, days_ago=120)
    _entry(db, member_user, days_ago=100)
    kept = _entry(db, member_user, days_ago=5)

    assert cleanup_old_activity(db, 90) == 2
    remaining = get_user_activity(db, member_user.id)
    assert [e.id for e in remaining] == [kept.id]
    assert cleanup_old_activity(db, 90) == 0


def test_cleanup_rejects_negative_window(db: Session):
    with pytest.raises(ActivityLogValidationError):
        cleanup_old_activity(db, -1)
