"""
➡️ But : Définir les formats d’entrée/sortie de l’API todos (couche validation).

TodoCreateIn → corps de requête POST

TodoUpdateIn → corps PUT (partiel)

TodoOut → réponse de l’API, avec créateur / assigné résolus en UserSummary

Les clés JSON sont en camelCase (assignedTo, dueDate...) ; les corps de requête
acceptent aussi le snake_case.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydField, field_validator
from pydantic.alias_generators import to_camel

from taskboard.db.models.todos import TodoPriority, TodoStatus
from taskboard.features.users.schemas import UserSummary


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- Inputs ----------

class _TodoFieldsIn(CamelModel):
    description: Optional[str] = None
    assigned_to: Optional[int] = PydField(None, examples=[2])
    assignment_note: Optional[str] = None
    priority: Optional[TodoPriority] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("assigned_to", "due_date", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # les formulaires envoient "" pour "pas de valeur"
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TodoCreateIn(_TodoFieldsIn):
    title: str = PydField(..., min_length=1, examples=["Ship report"])


class TodoUpdateIn(_TodoFieldsIn):
    title: Optional[str] = PydField(None, min_length=1)
    status: Optional[TodoStatus] = PydField(None, examples=["completed"])


# ---------- Outputs ----------

class StatusChangeOut(CamelModel):
    status: TodoStatus
    changed_by: Optional[UserSummary] = None
    changed_at: datetime


class TodoOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TodoStatus
    priority: TodoPriority
    category: Optional[str] = None
    due_date: Optional[datetime] = None
    created_by: UserSummary
    assigned_to: UserSummary
    assignment_note: Optional[str] = None
    assigned_at: datetime
    status_history: List[StatusChangeOut] = []
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TodoEnvelope(CamelModel):
    todo: TodoOut


class TodoListOut(CamelModel):
    todos: List[TodoOut]


class MessageOut(BaseModel):
    message: str


class DashboardStatsOut(CamelModel):
    total_created: int
    total_assigned: int
    completed_by_me: int
    pending_by_me: int
    completed_assigned_by_me: int
    pending_assigned_by_me: int


class DashboardOut(CamelModel):
    assigned_by_me: List[TodoOut]
    assigned_to_me: List[TodoOut]
    stats: DashboardStatsOut


class AnalyticsStatsOut(CamelModel):
    total_todos: int
    completed: int
    pending: int
    completion_rate: float


class AnalyticsOut(CamelModel):
    timeline: Dict[str, List[TodoOut]]
    stats: AnalyticsStatsOut
