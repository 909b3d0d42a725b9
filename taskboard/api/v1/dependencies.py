"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_todo_service() : crée un TodoService à partir d’une session DB.

get_current_user() : résout l'utilisateur authentifié depuis le header Bearer.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from typing import Optional

from fastapi import Depends, HTTPException, status, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from taskboard.db.session import get_session
from taskboard.db.models.users import User

from taskboard.db.repositories.users import UserRepository
from taskboard.db.repositories.todos import TodoRepository

from taskboard.features.authentication.services import AuthService
from taskboard.features.todos.services import TodoService

from taskboard.core.config import jwt_settings, settings
from taskboard.core.errors import AuthenticationError


# -----------------------------
# Repositories
# -----------------------------
def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)

def get_todo_repository(session: Session = Depends(get_session)) -> TodoRepository:
    return TodoRepository(session)


# -----------------------------
# Auth
# -----------------------------
def get_auth_service(user_repo: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(user_repo=user_repo, jwt_settings=jwt_settings)


# -----------------------------
# Todos
# -----------------------------
def get_todo_service(
    todo_repo: TodoRepository = Depends(get_todo_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> TodoService:
    return TodoService(
        todo_repo=todo_repo,
        user_repo=user_repo,
        default_period_days=settings.ANALYTICS_DEFAULT_PERIOD_DAYS,
        search_min_chars=settings.USER_SEARCH_MIN_CHARS,
        search_limit=settings.USER_SEARCH_LIMIT,
    )


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user(
    access_token: str = Depends(get_access_token_from_bearer),
    svc: AuthService = Depends(get_auth_service),
) -> User:
    """L'acteur de la requête : passé ensuite explicitement aux services."""
    try:
        return svc.get_current_user(access_token=access_token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
