import pytest

from taskboard.core.errors import AuthorizationError
from taskboard.db.models.todos import Todo
from taskboard.features.todos.policies import (
    can_delete,
    can_modify,
    can_view,
    ensure_can_delete,
    ensure_can_modify,
)

CREATOR, ASSIGNEE, STRANGER = 1, 2, 3


@pytest.fixture
def todo():
    return Todo(title="Ship report", created_by_id=CREATOR, assigned_to_id=ASSIGNEE)


def test_creator_and_assignee_can_modify(todo):
    assert can_modify(todo, CREATOR)
    assert can_modify(todo, ASSIGNEE)
    assert not can_modify(todo, STRANGER)
    assert can_view(todo, ASSIGNEE)
    assert not can_view(todo, STRANGER)


def test_only_creator_can_delete(todo):
    assert can_delete(todo, CREATOR)
    assert not can_delete(todo, ASSIGNEE)
    assert not can_delete(todo, STRANGER)


def test_ensure_helpers_raise_authorization_error(todo):
    ensure_can_modify(todo, ASSIGNEE)
    with pytest.raises(AuthorizationError):
        ensure_can_modify(todo, STRANGER)
    with pytest.raises(AuthorizationError, match="Only the creator"):
        ensure_can_delete(todo, ASSIGNEE)
