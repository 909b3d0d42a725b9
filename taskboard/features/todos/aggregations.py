"""
➡️ But : Calculs du tableau de bord et de la timeline, à partir de listes déjà chargées.

Fonctions pures (pas de DB) : elles acceptent tout objet ayant `status`
et `created_at` (Todo ORM ou TodoOut).
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Sequence, TypeVar

from taskboard.db.models.todos import TodoStatus
from taskboard.features.todos.schemas import AnalyticsStatsOut, DashboardStatsOut

T = TypeVar("T")


def _status_of(item) -> str:
    status = item.status
    return status.value if isinstance(status, TodoStatus) else status


def count_with_status(items: Sequence, status: TodoStatus) -> int:
    return sum(1 for item in items if _status_of(item) == status.value)


def dashboard_stats(assigned_by_me: Sequence, assigned_to_me: Sequence) -> DashboardStatsOut:
    """
    Compteurs du tableau de bord.
    Un todo auto-assigné est compté dans les deux listes (pas de dédoublonnage).
    """
    return DashboardStatsOut(
        total_created=len(assigned_by_me),
        total_assigned=len(assigned_to_me),
        completed_by_me=count_with_status(assigned_to_me, TodoStatus.COMPLETED),
        pending_by_me=count_with_status(assigned_to_me, TodoStatus.PENDING),
        completed_assigned_by_me=count_with_status(assigned_by_me, TodoStatus.COMPLETED),
        pending_assigned_by_me=count_with_status(assigned_by_me, TodoStatus.PENDING),
    )


def completion_rate(completed: int, total: int) -> float:
    """Pourcentage arrondi à une décimale ; 0 quand il n'y a rien."""
    if total == 0:
        return 0
    return round(completed / total * 100, 1)


def analytics_stats(items: Sequence) -> AnalyticsStatsOut:
    total = len(items)
    completed = count_with_status(items, TodoStatus.COMPLETED)
    return AnalyticsStatsOut(
        total_todos=total,
        completed=completed,
        pending=total - completed,
        completion_rate=completion_rate(completed, total),
    )


def group_by_creation_date(items: Sequence[T]) -> Dict[str, List[T]]:
    """
    'YYYY-MM-DD' (jour UTC de création) -> todos de ce jour.
    L'ordre d'entrée (plus récents d'abord) est conservé dans chaque groupe
    et entre les groupes.
    """
    timeline: Dict[str, List[T]] = {}
    for item in items:
        timeline.setdefault(item.created_at.date().isoformat(), []).append(item)
    return timeline


def window_start(now: datetime, period_days: int) -> datetime:
    """Minuit (UTC) du jour `now - period_days` : period_days=0 -> aujourd'hui.

    Au-delà du 1er janvier de l'an 1, la fenêtre commence à `datetime.min`.
    """
    if period_days >= (now.date() - date.min).days:
        return datetime.min
    return datetime.combine(now.date() - timedelta(days=period_days), time.min)
