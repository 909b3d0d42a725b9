"""
➡️ But : Tables des todos et de leur historique de statut.

Todo : la tâche (créateur, assigné, statut, priorité, échéance...).

TodoStatusChange : une ligne par changement de statut (création incluse),
jamais modifiée, supprimée seulement avec son todo.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer

from .base import BaseModelDB, utcnow


class TodoStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Bornes de longueur (appliquées après trim par features/todos/domain.py)
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 50
ASSIGNMENT_NOTE_MAX_LENGTH = 200


class Todo(BaseModelDB, table=True):
    title: str = Field(index=True, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: str = Field(default=TodoStatus.PENDING.value, index=True, max_length=16)
    priority: str = Field(default=TodoPriority.MEDIUM.value, max_length=16)
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)
    due_date: Optional[datetime] = Field(default=None, index=True, sa_type=DateTime)

    # Créateur : fixé à la création, jamais modifié
    created_by_id: int = Field(foreign_key="user.id", index=True)
    # Assigné : le créateur par défaut
    assigned_to_id: int = Field(foreign_key="user.id", index=True)
    assignment_note: Optional[str] = Field(default=None, max_length=ASSIGNMENT_NOTE_MAX_LENGTH)
    assigned_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)


class TodoStatusChange(BaseModelDB, table=True):
    todo_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("todo.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Todo concerné",
    )
    status: str = Field(max_length=16)
    changed_by_id: Optional[int] = Field(default=None, foreign_key="user.id")
    changed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
