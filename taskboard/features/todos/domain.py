"""
➡️ But : Règles métier d'un todo, sans base ni HTTP.

new_todo() : construit un Todo valide (longueurs, enums, assigné par défaut).

validate_changes() : mêmes règles pour une mise à jour partielle.

apply_status_change() : transition de statut explicite. Le service l'appelle
avec l'ancien et le nouveau statut ; elle met à jour completed_at et renvoie
l'entrée d'historique à persister.

🔹 Avantages :

Tout est testable avec de simples objets en mémoire.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type

from taskboard.core.errors import ValidationError
from taskboard.db.models.todos import (
    ASSIGNMENT_NOTE_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    Todo,
    TodoPriority,
    TodoStatus,
    TodoStatusChange,
)

_OPTIONAL_TEXT_LIMITS = {
    "description": DESCRIPTION_MAX_LENGTH,
    "category": CATEGORY_MAX_LENGTH,
    "assignment_note": ASSIGNMENT_NOTE_MAX_LENGTH,
}


# --------------- Helpers ---------------
def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Les dates sont stockées en UTC sans fuseau."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _coerce_enum(enum_cls: Type[Enum], value: Any, field: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}' (expected one of: {allowed})") from None


def _clean_title(value: Optional[str]) -> str:
    title = (value or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def _clean_optional_text(field: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    max_length = _OPTIONAL_TEXT_LIMITS[field]
    if len(text) > max_length:
        label = field.replace("_", " ").capitalize()
        raise ValidationError(f"{label} must be at most {max_length} characters")
    return text or None


# --------------- Validation ---------------
def validate_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valide et normalise les champs éditables présents dans `changes`.
    Les clés absentes ne sont pas touchées ; les clés inconnues sont ignorées.
    """
    cleaned: Dict[str, Any] = {}
    for field, value in changes.items():
        if field == "title":
            cleaned[field] = _clean_title(value)
        elif field in _OPTIONAL_TEXT_LIMITS:
            cleaned[field] = _clean_optional_text(field, value)
        elif field == "priority":
            cleaned[field] = _coerce_enum(TodoPriority, value, "priority")
        elif field == "status":
            cleaned[field] = _coerce_enum(TodoStatus, value, "status")
        elif field == "due_date":
            cleaned[field] = to_utc_naive(value)
    return cleaned


def new_todo(
    *,
    title: str,
    created_by: int,
    at: datetime,
    description: Optional[str] = None,
    assigned_to: Optional[int] = None,
    assignment_note: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    due_date: Optional[datetime] = None,
) -> Todo:
    """
    Construit un Todo en statut `pending`.
    L'assigné vaut le créateur si non précisé ; la note est ignorée dans ce cas.
    L'historique n'est pas créé ici : appeler apply_status_change(todo, None, ...).
    """
    fields = validate_changes({
        "title": title,
        "description": description,
        "assignment_note": assignment_note,
        "priority": priority or TodoPriority.MEDIUM,
        "category": category,
        "due_date": due_date,
    })
    todo = Todo(
        **fields,
        status=TodoStatus.PENDING.value,
        created_by_id=created_by,
        assigned_to_id=assigned_to if assigned_to is not None else created_by,
        assigned_at=at,
        created_at=at,
        updated_at=at,
    )
    normalize_assignment_note(todo)
    return todo


def normalize_assignment_note(todo: Todo) -> None:
    """Une note d'assignation n'a de sens que si l'assigné n'est pas le créateur."""
    if todo.assigned_to_id == todo.created_by_id:
        todo.assignment_note = None


# --------------- Transitions ---------------
def apply_status_change(
    todo: Todo,
    previous: Optional[str],
    new: str,
    *,
    changed_by: Optional[int],
    at: datetime,
) -> Optional[TodoStatusChange]:
    """
    Applique le passage `previous` -> `new`.

    - previous=None : première sauvegarde, le statut initial compte comme un changement.
    - completed : completed_at = at ; pending : completed_at = None.
    - Renvoie l'entrée d'historique (à persister avec le todo), ou None si rien ne change.
    """
    new = _coerce_enum(TodoStatus, new, "status")
    if previous is not None and _coerce_enum(TodoStatus, previous, "status") == new:
        return None

    todo.status = new
    todo.completed_at = at if new == TodoStatus.COMPLETED.value else None
    return TodoStatusChange(status=new, changed_by_id=changed_by, changed_at=at)
