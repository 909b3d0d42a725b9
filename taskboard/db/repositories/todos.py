"""
➡️ But : Encapsuler toutes les opérations de base de données sur les todos.

Chaque lecture renvoie des lignes (Todo, créateur, assigné) : la jointure vers
User est faite ici, explicitement, pour que le service puisse exposer des
résumés {id, username, email} au lieu d'identifiants nus.

Ne contient aucune logique métier (ni droits, ni transitions de statut).
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import aliased
from sqlmodel import select

from taskboard.db.repositories.base import BaseRepository
from taskboard.db.models.todos import Todo, TodoStatusChange
from taskboard.db.models.users import User

Creator = aliased(User, name="creator")
Assignee = aliased(User, name="assignee")

TodoRow = Tuple[Todo, User, User]
HistoryRow = Tuple[TodoStatusChange, Optional[User]]


class TodoRepository(BaseRepository[Todo]):
    model = Todo

    # --------------- Helpers ---------------
    @staticmethod
    def _joined():
        return (
            select(Todo, Creator, Assignee)
            .join(Creator, Creator.id == Todo.created_by_id)
            .join(Assignee, Assignee.id == Todo.assigned_to_id)
        )

    @staticmethod
    def _newest_first(stmt):
        return stmt.order_by(Todo.created_at.desc(), Todo.id.desc())

    def _rows(self, stmt) -> List[TodoRow]:
        return [(todo, creator, assignee) for todo, creator, assignee in self.session.exec(stmt).all()]

    # --------------- Reads ---------------
    def get_row(self, todo_id: int) -> Optional[TodoRow]:
        rows = self._rows(self._joined().where(Todo.id == todo_id))
        return rows[0] if rows else None

    def list_created_by(self, user_id: int) -> List[TodoRow]:
        stmt = self._joined().where(Todo.created_by_id == user_id)
        return self._rows(self._newest_first(stmt))

    def list_assigned_to(self, user_id: int) -> List[TodoRow]:
        stmt = self._joined().where(Todo.assigned_to_id == user_id)
        return self._rows(self._newest_first(stmt))

    def list_for_user(self, user_id: int, *, since: Optional[datetime] = None) -> List[TodoRow]:
        """Todos dont l'utilisateur est créateur OU assigné, plus récents d'abord."""
        stmt = self._joined().where(
            or_(Todo.created_by_id == user_id, Todo.assigned_to_id == user_id)
        )
        if since is not None:
            stmt = stmt.where(Todo.created_at >= since)
        return self._rows(self._newest_first(stmt))

    def list_status_history(self, todo_ids: Iterable[int]) -> Dict[int, List[HistoryRow]]:
        """Historique de statut par todo, dans l'ordre chronologique."""
        ids = set(todo_ids)
        if not ids:
            return {}
        stmt = (
            select(TodoStatusChange, User)
            .join(User, User.id == TodoStatusChange.changed_by_id, isouter=True)
            .where(TodoStatusChange.todo_id.in_(ids))
            .order_by(TodoStatusChange.changed_at, TodoStatusChange.id)
        )
        history: Dict[int, List[HistoryRow]] = {todo_id: [] for todo_id in ids}
        for change, user in self.session.exec(stmt).all():
            history[change.todo_id].append((change, user))
        return history

    # --------------- Writes ---------------
    def insert(self, todo: Todo, *, history: Sequence[TodoStatusChange] = ()) -> Todo:
        """Insère le todo et ses premières entrées d'historique dans la même transaction."""
        self.add(todo, commit=False)
        self._add_history(todo, history)
        self.session.commit()
        self.session.refresh(todo)
        return todo

    def update(self, todo: Todo, *, history: Sequence[TodoStatusChange] = (), **changes) -> Todo:
        self._add_history(todo, history)
        return super().update(todo, **changes)

    def delete(self, todo: Todo) -> None:
        """Suppression définitive : l'historique part avec le todo."""
        changes = self.session.exec(
            select(TodoStatusChange).where(TodoStatusChange.todo_id == todo.id)
        ).all()
        for change in changes:
            self.session.delete(change)
        self.session.flush()
        super().delete(todo)

    def _add_history(self, todo: Todo, history: Sequence[TodoStatusChange]) -> None:
        for change in history:
            change.todo_id = todo.id
            self.session.add(change)
