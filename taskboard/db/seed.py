import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List

import yaml
from sqlmodel import Session

from taskboard.db.models.users import User
from taskboard.db.repositories.todos import TodoRepository
from taskboard.db.repositories.users import UserRepository
from taskboard.features.todos.schemas import TodoCreateIn, TodoUpdateIn
from taskboard.features.todos.services import TodoService
from taskboard.security.password import hash_password

logger = logging.getLogger(__name__)


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Users
# -----------------------------
def seed_users(user_repo: UserRepository, users_yaml: List[Dict[str, Any]]) -> Dict[str, User]:
    """username -> User (créé si absent, réutilisé sinon)."""
    users: Dict[str, User] = {}
    for item in users_yaml:
        username = item["username"]
        user = user_repo.get_by_username(username)
        if not user:
            user = user_repo.create(
                username=username,
                email=item["email"].lower(),
                hashed_password=hash_password(item["password"]),
            )
            logger.info("Seed: user %s created", username)
        users[username] = user
    return users


# -----------------------------
# Todos
# -----------------------------
def seed_todos(svc: TodoService, users: Dict[str, User], todos_yaml: List[Dict[str, Any]]) -> int:
    """
    Crée les todos via TodoService (historique et règles d'assignation inclus).
    Un todo déjà présent (même créateur, même titre) est ignoré.
    """
    created = 0
    for item in todos_yaml:
        creator = users[item["created_by"]]
        existing_titles = {row[0].title for row in svc.todos.list_created_by(creator.id)}
        if item["title"] in existing_titles:
            continue

        assignee = users[item.get("assigned_to", item["created_by"])]
        due_date = None
        if item.get("due_in_days") is not None:
            due_date = svc.now_fn() + timedelta(days=int(item["due_in_days"]))

        todo = svc.create(
            TodoCreateIn(
                title=item["title"],
                description=item.get("description"),
                assigned_to=assignee.id,
                assignment_note=item.get("assignment_note"),
                priority=item.get("priority"),
                category=item.get("category"),
                due_date=due_date,
            ),
            actor_id=creator.id,
        )
        if item.get("status") and item["status"] != todo.status.value:
            svc.update(todo.id, TodoUpdateIn(status=item["status"]), actor_id=assignee.id)
        created += 1
    return created


def seed_all(*, session: Session, seed_path: str | Path) -> Dict[str, int]:
    data = load_seed_yaml(seed_path)
    user_repo = UserRepository(session)
    svc = TodoService(todo_repo=TodoRepository(session), user_repo=user_repo)

    users = seed_users(user_repo, data.get("users", []))
    created = seed_todos(svc, users, data.get("todos", []))
    logger.info("Seed terminé : %s utilisateurs, %s todos créés", len(users), created)
    return {"users": len(users), "todos": created}
