"""
➡️ But : Qui a le droit de faire quoi sur un todo.

- Créateur ou assigné : lire, modifier (statut, champs, réassignation).
- Créateur seulement : supprimer.
"""

from taskboard.core.errors import AuthorizationError
from taskboard.db.models.todos import Todo


def can_modify(todo: Todo, actor_id: int) -> bool:
    return actor_id in (todo.created_by_id, todo.assigned_to_id)


def can_view(todo: Todo, actor_id: int) -> bool:
    return can_modify(todo, actor_id)


def can_delete(todo: Todo, actor_id: int) -> bool:
    return actor_id == todo.created_by_id


def ensure_can_view(todo: Todo, actor_id: int) -> None:
    if not can_view(todo, actor_id):
        raise AuthorizationError("Not authorized to view this todo")


def ensure_can_modify(todo: Todo, actor_id: int) -> None:
    if not can_modify(todo, actor_id):
        raise AuthorizationError("Not authorized to modify this todo")


def ensure_can_delete(todo: Todo, actor_id: int) -> None:
    if not can_delete(todo, actor_id):
        raise AuthorizationError("Only the creator can delete this todo")
