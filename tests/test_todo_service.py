from datetime import datetime

import pytest
from sqlalchemy import DateTime

from taskboard.core.errors import (
    AuthorizationError,
    TodoNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from taskboard.db.models.todos import Todo, TodoStatus, TodoStatusChange
from taskboard.db.models.users import User
from taskboard.features.todos.schemas import TodoCreateIn, TodoUpdateIn


def _create(svc, actor, **fields):
    fields.setdefault("title", "Ship report")
    return svc.create(TodoCreateIn(**fields), actor_id=actor.id)


# ---------- create ----------

@pytest.mark.parametrize("table", [User.__table__, Todo.__table__, TodoStatusChange.__table__])
def test_datetime_columns_store_naive_utc(table):
    columns = [c for c in table.columns if isinstance(c.type, DateTime)]

    assert columns
    assert all(c.type.timezone is False for c in columns)


def test_created_todo_keeps_naive_utc_timestamps(todo_service, clock, alice):
    todo = _create(todo_service, alice, due_date=datetime(2025, 7, 1, 9, 0))

    assert todo.created_at == clock.now
    assert todo.created_at.tzinfo is None
    assert todo.due_date == datetime(2025, 7, 1, 9, 0)


def test_create_resolves_creator_and_assignee_summaries(todo_service, alice, bob):
    todo = _create(todo_service, alice, assigned_to=bob.id, assignment_note="Numbers in the drive")

    assert todo.created_by.model_dump() == {"id": alice.id, "username": "alice", "email": "alice@example.com"}
    assert todo.assigned_to.username == "bob"
    assert todo.assignment_note == "Numbers in the drive"
    assert todo.status is TodoStatus.PENDING
    assert len(todo.status_history) == 1
    assert todo.status_history[0].changed_by.id == alice.id


def test_create_assigned_to_self_clears_note(todo_service, alice):
    todo = _create(todo_service, alice, assigned_to=alice.id, assignment_note="ignored")

    assert todo.assigned_to.id == alice.id
    assert todo.assignment_note is None


def test_create_with_unknown_assignee_fails_without_writing(todo_service, todo_repo, alice):
    with pytest.raises(UserNotFoundError):
        _create(todo_service, alice, assigned_to=999)
    assert todo_repo.list_for_user(alice.id) == []


def test_create_rejects_blank_title(todo_service, alice):
    with pytest.raises(ValidationError):
        _create(todo_service, alice, title="   ")


# ---------- update ----------

def test_assignee_completes_then_reopens(todo_service, clock, alice, bob):
    todo = _create(todo_service, alice, assigned_to=bob.id)

    done_at = clock.advance(hours=1)
    done = todo_service.update(todo.id, TodoUpdateIn(status="completed"), actor_id=bob.id)
    assert done.completed_at == done_at
    assert [h.status for h in done.status_history] == ["pending", "completed"]
    assert done.status_history[-1].changed_by.id == bob.id

    clock.advance(hours=1)
    reopened = todo_service.update(todo.id, TodoUpdateIn(status="pending"), actor_id=alice.id)
    assert reopened.completed_at is None
    assert len(reopened.status_history) == 3


def test_history_has_one_entry_per_toggle_plus_creation(todo_service, clock, alice):
    todo = _create(todo_service, alice)
    toggles = 4
    for i in range(toggles):
        clock.advance(minutes=1)
        status = "completed" if i % 2 == 0 else "pending"
        todo = todo_service.update(todo.id, TodoUpdateIn(status=status), actor_id=alice.id)

    assert len(todo.status_history) == toggles + 1
    stamps = [h.changed_at for h in todo.status_history]
    assert stamps == sorted(stamps)


def test_update_with_same_status_does_not_grow_history(todo_service, alice):
    todo = _create(todo_service, alice)
    updated = todo_service.update(todo.id, TodoUpdateIn(status="pending"), actor_id=alice.id)
    assert len(updated.status_history) == 1


def test_stranger_cannot_update(todo_service, alice, bob, carol):
    todo = _create(todo_service, alice, assigned_to=bob.id)

    with pytest.raises(AuthorizationError):
        todo_service.update(todo.id, TodoUpdateIn(title="Hijacked"), actor_id=carol.id)
    assert todo_service.get(todo.id, actor_id=alice.id).title == "Ship report"


def test_update_missing_todo(todo_service, alice):
    with pytest.raises(TodoNotFoundError):
        todo_service.update(12345, TodoUpdateIn(title="x"), actor_id=alice.id)


def test_reassignment_refreshes_assigned_at_only_on_change(todo_service, clock, alice, bob):
    todo = _create(todo_service, alice)
    created_at = todo.assigned_at

    moved_at = clock.advance(hours=2)
    moved = todo_service.update(todo.id, TodoUpdateIn(assigned_to=bob.id, assignment_note="yours now"), actor_id=alice.id)
    assert moved.assigned_to.id == bob.id
    assert moved.assigned_at == moved_at != created_at
    assert moved.assignment_note == "yours now"

    clock.advance(hours=2)
    same = todo_service.update(todo.id, TodoUpdateIn(assigned_to=bob.id), actor_id=bob.id)
    assert same.assigned_at == moved_at

    back = todo_service.update(todo.id, TodoUpdateIn(assigned_to=alice.id), actor_id=bob.id)
    assert back.assigned_to.id == alice.id
    assert back.assignment_note is None


def test_reassignment_to_unknown_user_leaves_record_untouched(todo_service, alice):
    todo = _create(todo_service, alice)

    with pytest.raises(UserNotFoundError):
        todo_service.update(todo.id, TodoUpdateIn(assigned_to=999, title="Changed"), actor_id=alice.id)

    reloaded = todo_service.get(todo.id, actor_id=alice.id)
    assert reloaded.title == "Ship report"
    assert reloaded.assigned_to.id == alice.id


def test_identical_update_only_advances_updated_at(todo_service, clock, alice, bob):
    fields = dict(
        title="Ship report",
        description="Quarterly numbers",
        assigned_to=bob.id,
        assignment_note="Due Friday",
        priority="high",
        category="work",
        due_date=datetime(2025, 6, 20, 17, 0),
    )
    created = _create(todo_service, alice, **fields)

    clock.advance(seconds=30)
    updated = todo_service.update(created.id, TodoUpdateIn(status="pending", **fields), actor_id=alice.id)

    assert updated.updated_at > created.updated_at
    assert updated.model_dump(exclude={"updated_at"}) == created.model_dump(exclude={"updated_at"})


# ---------- delete ----------

def test_assignee_cannot_delete_but_creator_can(todo_service, alice, bob):
    todo = _create(todo_service, alice, assigned_to=bob.id)

    with pytest.raises(AuthorizationError):
        todo_service.delete(todo.id, actor_id=bob.id)

    todo_service.delete(todo.id, actor_id=alice.id)
    with pytest.raises(TodoNotFoundError):
        todo_service.get(todo.id, actor_id=alice.id)
    with pytest.raises(TodoNotFoundError):
        todo_service.delete(todo.id, actor_id=alice.id)


# ---------- queries ----------

def test_list_for_user_is_newest_first_and_scoped(todo_service, clock, alice, bob, carol):
    first = _create(todo_service, alice, title="first")
    clock.advance(minutes=1)
    second = _create(todo_service, bob, title="second", assigned_to=alice.id)
    clock.advance(minutes=1)
    _create(todo_service, carol, title="not mine")

    todos = todo_service.list_for_user(alice.id)

    assert [t.id for t in todos] == [second.id, first.id]


def test_dashboard_scenario_assignment_and_completion(todo_service, clock, alice, bob):
    report = _create(todo_service, alice, title="Ship report", assigned_to=bob.id)
    clock.advance(minutes=5)
    todo_service.update(report.id, TodoUpdateIn(status="completed"), actor_id=bob.id)

    for_alice = todo_service.build_dashboard(alice.id)
    assert [t.id for t in for_alice.assigned_by_me] == [report.id]
    assert for_alice.assigned_to_me == []
    assert for_alice.stats.completed_assigned_by_me == 1

    for_bob = todo_service.build_dashboard(bob.id)
    assert [t.id for t in for_bob.assigned_to_me] == [report.id]
    assert for_bob.stats.completed_by_me == 1
    assert for_bob.stats.total_created == 0


def test_dashboard_counts_self_assigned_todo_twice(todo_service, alice):
    mine = _create(todo_service, alice, title="Self")

    dashboard = todo_service.build_dashboard(alice.id)

    assert [t.id for t in dashboard.assigned_by_me] == [mine.id]
    assert [t.id for t in dashboard.assigned_to_me] == [mine.id]
    assert dashboard.stats.total_created == len(dashboard.assigned_by_me) == 1
    assert dashboard.stats.total_assigned == 1


def test_analytics_period_zero_keeps_only_today(todo_service, clock, alice):
    today = clock.now
    clock.now = datetime(2025, 6, 13, 8, 0)
    old = _create(todo_service, alice, title="two days ago")
    clock.now = today
    fresh = _create(todo_service, alice, title="today")
    clock.advance(minutes=1)

    only_today = todo_service.build_analytics(alice.id, 0)
    assert list(only_today.timeline) == ["2025-06-15"]
    assert [t.id for t in only_today.timeline["2025-06-15"]] == [fresh.id]

    todo_service.update(old.id, TodoUpdateIn(status="completed"), actor_id=alice.id)
    month = todo_service.build_analytics(alice.id)
    assert list(month.timeline) == ["2025-06-15", "2025-06-13"]
    assert month.stats.total_todos == 2
    assert month.stats.completed == 1
    assert month.stats.completion_rate == 50.0


def test_analytics_without_todos_has_zero_rate(todo_service, alice):
    analytics = todo_service.build_analytics(alice.id, 0)
    assert analytics.timeline == {}
    assert analytics.stats.completion_rate == 0


def test_analytics_rejects_negative_period(todo_service, alice):
    with pytest.raises(ValidationError):
        todo_service.build_analytics(alice.id, -1)


def test_analytics_with_very_large_period_covers_everything(todo_service, clock, alice):
    clock.now = datetime(2001, 1, 1, 9, 0)
    _create(todo_service, alice, title="long ago")
    clock.now = datetime(2025, 6, 15, 12, 0)

    analytics = todo_service.build_analytics(alice.id, 1_000_000)

    assert list(analytics.timeline) == ["2001-01-01"]
    assert analytics.stats.total_todos == 1


# ---------- user search ----------

def test_search_needs_two_characters(todo_service, alice, make_user):
    make_user("albert")
    assert todo_service.search_assignable_users("a", exclude_user_id=alice.id) == []
    assert todo_service.search_assignable_users(None, exclude_user_id=alice.id) == []


def test_search_threshold_counts_raw_characters(todo_service, alice, make_user):
    make_user("mary ann")
    make_user("albert")

    found = todo_service.search_assignable_users(" a", exclude_user_id=alice.id)

    assert [u.username for u in found] == ["mary ann"]


def test_search_matches_username_or_email_case_insensitively(todo_service, alice, make_user):
    make_user("Albert")
    make_user("zed", email="zed@ALPHA.io")
    make_user("bob")

    found = todo_service.search_assignable_users("AL", exclude_user_id=alice.id)

    assert {u.username for u in found} == {"Albert", "zed"}
    assert alice.id not in {u.id for u in found}


def test_search_excludes_requester_and_caps_results(todo_service, make_user):
    requester = make_user("team-lead")
    for i in range(12):
        make_user(f"team-{i:02d}")

    found = todo_service.search_assignable_users("team", exclude_user_id=requester.id)

    assert len(found) == 10
    assert requester.id not in {u.id for u in found}


def test_search_treats_like_wildcards_literally(todo_service, alice, make_user):
    make_user("bob")
    assert todo_service.search_assignable_users("%_", exclude_user_id=alice.id) == []
