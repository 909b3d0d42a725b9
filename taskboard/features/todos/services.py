"""
➡️ But : Contenir la logique métier des todos : orchestrer les repos, appliquer les règles, lever les erreurs.

TodoService : création / mise à jour / suppression avec contrôle des droits,
tableau de bord, timeline, recherche d'utilisateurs à qui assigner.

L'acteur (utilisateur authentifié) est toujours passé explicitement (`actor_id=`).

🔹 Avantages :

Code métier découplé du web.

Test unitaire possible sans passer par FastAPI.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from taskboard.core.errors import (
    AuthorizationError,
    TodoNotFoundError,
    UnexpectedError,
    UserNotFoundError,
    ValidationError,
)
from taskboard.db.models.base import utcnow
from taskboard.db.models.todos import Todo
from taskboard.db.repositories.todos import HistoryRow, TodoRepository, TodoRow
from taskboard.db.repositories.users import UserRepository
from taskboard.features.todos import aggregations
from taskboard.features.todos.domain import (
    apply_status_change,
    new_todo,
    validate_changes,
)
from taskboard.features.todos.policies import (
    ensure_can_delete,
    ensure_can_modify,
    ensure_can_view,
)
from taskboard.features.todos.schemas import (
    AnalyticsOut,
    DashboardOut,
    StatusChangeOut,
    TodoCreateIn,
    TodoOut,
    TodoUpdateIn,
)
from taskboard.features.users.schemas import UserSummary

logger = logging.getLogger(__name__)


class TodoService:
    def __init__(
        self,
        *,
        todo_repo: TodoRepository,
        user_repo: UserRepository,
        now_fn: Callable[[], datetime] = utcnow,
        default_period_days: int = 30,
        search_min_chars: int = 2,
        search_limit: int = 10,
    ):
        self.todos = todo_repo
        self.users = user_repo
        self.now_fn = now_fn
        self.default_period_days = default_period_days
        self.search_min_chars = search_min_chars
        self.search_limit = search_limit

    # --------------- Helpers ---------------
    def _get_todo(self, todo_id: int) -> Todo:
        todo = self.todos.get(todo_id)
        if not todo:
            raise TodoNotFoundError()
        return todo

    def _ensure_user_exists(self, user_id: int) -> None:
        if not self.users.get(user_id):
            raise UserNotFoundError()

    @staticmethod
    def _history_out(history: List[HistoryRow]) -> List[StatusChangeOut]:
        return [
            StatusChangeOut(
                status=change.status,
                changed_by=UserSummary.model_validate(user) if user else None,
                changed_at=change.changed_at,
            )
            for change, user in history
        ]

    def _to_out(self, row: TodoRow, history: List[HistoryRow]) -> TodoOut:
        todo, creator, assignee = row
        return TodoOut(
            id=todo.id,
            title=todo.title,
            description=todo.description,
            status=todo.status,
            priority=todo.priority,
            category=todo.category,
            due_date=todo.due_date,
            created_by=UserSummary.model_validate(creator),
            assigned_to=UserSummary.model_validate(assignee),
            assignment_note=todo.assignment_note,
            assigned_at=todo.assigned_at,
            status_history=self._history_out(history),
            completed_at=todo.completed_at,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )

    def _rows_to_out(self, rows: Iterable[TodoRow]) -> List[TodoOut]:
        rows = list(rows)
        history = self.todos.list_status_history(todo.id for todo, _, _ in rows)
        return [self._to_out(row, history.get(row[0].id, [])) for row in rows]

    def _load_out(self, todo_id: int) -> TodoOut:
        row = self.todos.get_row(todo_id)
        if not row:
            raise TodoNotFoundError()
        return self._rows_to_out([row])[0]

    def _reload(self, todo_id: int) -> TodoOut:
        """Relit le todo juste après écriture : s'il manque, c'est une incohérence de la base."""
        row = self.todos.get_row(todo_id)
        if not row:
            raise UnexpectedError(f"Todo {todo_id} could not be reloaded after save")
        return self._rows_to_out([row])[0]

    # --------------- Commands ---------------
    def create(self, payload: TodoCreateIn, *, actor_id: int) -> TodoOut:
        now = self.now_fn()
        assigned_to = payload.assigned_to
        if assigned_to is None or assigned_to == actor_id:
            assigned_to = actor_id

        todo = new_todo(
            title=payload.title,
            description=payload.description,
            created_by=actor_id,
            assigned_to=assigned_to,
            assignment_note=payload.assignment_note,
            priority=payload.priority,
            category=payload.category,
            due_date=payload.due_date,
            at=now,
        )
        if assigned_to != actor_id:
            self._ensure_user_exists(assigned_to)

        initial = apply_status_change(todo, None, todo.status, changed_by=actor_id, at=now)
        self.todos.insert(todo, history=[initial])
        logger.info("Todo %s created by user %s (assigned to %s)", todo.id, actor_id, todo.assigned_to_id)
        return self._reload(todo.id)

    def update(self, todo_id: int, payload: TodoUpdateIn, *, actor_id: int) -> TodoOut:
        todo = self._get_todo(todo_id)
        try:
            ensure_can_modify(todo, actor_id)
        except AuthorizationError:
            logger.warning("User %s refused to modify todo %s", actor_id, todo_id)
            raise

        patch = payload.model_dump(exclude_unset=True)
        assigned_to = patch.pop("assigned_to", None)
        status = patch.pop("status", None)
        changes = validate_changes(patch)
        now = self.now_fn()

        # Réassignation : seulement si la valeur change vraiment
        if assigned_to is not None and assigned_to != todo.assigned_to_id:
            self._ensure_user_exists(assigned_to)
            changes["assigned_to_id"] = assigned_to
            changes["assigned_at"] = now
            logger.info("Todo %s reassigned from %s to %s by %s", todo_id, todo.assigned_to_id, assigned_to, actor_id)

        if changes.get("assigned_to_id", todo.assigned_to_id) == todo.created_by_id:
            changes["assignment_note"] = None

        history = []
        if status is not None:
            change = apply_status_change(todo, todo.status, status, changed_by=actor_id, at=now)
            if change is not None:
                history.append(change)
                logger.info("Todo %s status -> %s by user %s", todo_id, change.status, actor_id)

        changes["updated_at"] = now
        self.todos.update(todo, history=history, **changes)
        return self._reload(todo_id)

    def delete(self, todo_id: int, *, actor_id: int) -> None:
        todo = self._get_todo(todo_id)
        try:
            ensure_can_delete(todo, actor_id)
        except AuthorizationError:
            logger.warning("User %s refused to delete todo %s", actor_id, todo_id)
            raise
        self.todos.delete(todo)
        logger.info("Todo %s deleted by user %s", todo_id, actor_id)

    # --------------- Queries ---------------
    def get(self, todo_id: int, *, actor_id: int) -> TodoOut:
        todo = self._get_todo(todo_id)
        ensure_can_view(todo, actor_id)
        return self._load_out(todo_id)

    def list_for_user(self, user_id: int) -> List[TodoOut]:
        return self._rows_to_out(self.todos.list_for_user(user_id))

    def search_assignable_users(self, query: Optional[str], *, exclude_user_id: int) -> List[UserSummary]:
        text = query or ""
        if len(text) < self.search_min_chars:
            return []
        users = self.users.search(text, exclude_id=exclude_user_id, limit=self.search_limit)
        return [UserSummary.model_validate(u) for u in users]

    def build_dashboard(self, user_id: int) -> DashboardOut:
        by_me_rows = self.todos.list_created_by(user_id)
        to_me_rows = self.todos.list_assigned_to(user_id)

        history = self.todos.list_status_history(
            row[0].id for row in [*by_me_rows, *to_me_rows]
        )
        assigned_by_me = [self._to_out(row, history.get(row[0].id, [])) for row in by_me_rows]
        assigned_to_me = [self._to_out(row, history.get(row[0].id, [])) for row in to_me_rows]

        return DashboardOut(
            assigned_by_me=assigned_by_me,
            assigned_to_me=assigned_to_me,
            stats=aggregations.dashboard_stats(assigned_by_me, assigned_to_me),
        )

    def build_analytics(self, user_id: int, period_days: Optional[int] = None) -> AnalyticsOut:
        if period_days is None:
            period_days = self.default_period_days
        if period_days < 0:
            raise ValidationError("Period must be a non-negative number of days")

        since = aggregations.window_start(self.now_fn(), period_days)
        todos = self._rows_to_out(self.todos.list_for_user(user_id, since=since))
        return AnalyticsOut(
            timeline=aggregations.group_by_creation_date(todos),
            stats=aggregations.analytics_stats(todos),
        )
