"""
➡️ But : Définir les endpoints de l’API todos.

C’est la couche la plus proche du web :

Réceptionne les requêtes HTTP (GET, POST, PUT, DELETE)

Résout l'utilisateur authentifié, puis appelle le service correspondant

Traduit les erreurs métier en codes HTTP et retourne les schémas de sortie (response_model)

🔹 Avantages :

Automatiquement documentée dans Swagger.

Isolation totale du reste du code : les routes ne contiennent ni SQL ni logique métier.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from taskboard.api.v1.dependencies import get_current_user, get_todo_service
from taskboard.api.v1.errors import to_http_exception
from taskboard.core.errors import DomainError
from taskboard.db.models.users import User
from taskboard.features.todos.schemas import (
    AnalyticsOut,
    DashboardOut,
    MessageOut,
    TodoCreateIn,
    TodoEnvelope,
    TodoListOut,
    TodoUpdateIn,
)
from taskboard.features.todos.services import TodoService
from taskboard.features.users.schemas import UserSearchOut

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    responses={
        401: {"description": "Token manquant ou invalide"},
        500: {"description": "Erreur inattendue"},
    },
)

# -----------------------------
# Dashboard / analytics
# (déclarés avant /{todo_id})
# -----------------------------
@router.get(
    "/dashboard",
    summary="Tableau de bord",
    description="Todos créés par moi / assignés à moi, avec compteurs. "
                "Un todo auto-assigné apparaît dans les deux listes.",
    response_model=DashboardOut,
)
def get_dashboard(
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    return svc.build_dashboard(user.id)


@router.get(
    "/analytics",
    summary="Timeline d'activité",
    description="Todos créés sur les `period` derniers jours, groupés par jour (UTC), "
                "avec taux de complétion.",
    response_model=AnalyticsOut,
)
def get_analytics(
    period: Optional[int] = Query(None, ge=0, description="Nombre de jours (30 par défaut)", examples=[30]),
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    try:
        return svc.build_analytics(user.id, period)
    except DomainError as e:
        raise to_http_exception(e)


# -----------------------------
# Recherche d'utilisateurs (assignation)
# -----------------------------
@router.get(
    "/users/search",
    summary="Chercher un utilisateur à qui assigner",
    description="Recherche insensible à la casse sur username ou email (10 résultats max). "
                "Moins de 2 caractères : liste vide.",
    response_model=UserSearchOut,
)
def search_users(
    query: Optional[str] = Query(None, examples=["al"]),
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    return UserSearchOut(users=svc.search_assignable_users(query, exclude_user_id=user.id))


# -----------------------------
# CRUD
# -----------------------------
@router.get(
    "",
    summary="Lister mes todos",
    description="Todos que j'ai créés ou qui me sont assignés, plus récents d'abord.",
    response_model=TodoListOut,
)
def list_todos(
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    return TodoListOut(todos=svc.list_for_user(user.id))


@router.post(
    "",
    summary="Créer un todo",
    status_code=status.HTTP_201_CREATED,
    response_model=TodoEnvelope,
    responses={400: {"description": "Champs invalides ou utilisateur assigné introuvable"}},
)
def create_todo(
    payload: TodoCreateIn,
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    try:
        return TodoEnvelope(todo=svc.create(payload, actor_id=user.id))
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/{todo_id}",
    summary="Récupérer un todo",
    response_model=TodoEnvelope,
    responses={403: {"description": "Ni créateur ni assigné"}, 404: {"description": "Not Found"}},
)
def get_todo(
    todo_id: int = Path(..., ge=1),
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    try:
        return TodoEnvelope(todo=svc.get(todo_id, actor_id=user.id))
    except DomainError as e:
        raise to_http_exception(e)


@router.put(
    "/{todo_id}",
    summary="Mettre à jour un todo",
    description="Mise à jour partielle : statut, champs, réassignation. Créateur ou assigné uniquement.",
    response_model=TodoEnvelope,
    responses={
        400: {"description": "Champs invalides ou utilisateur assigné introuvable"},
        403: {"description": "Ni créateur ni assigné"},
        404: {"description": "Not Found"},
    },
)
def update_todo(
    payload: TodoUpdateIn,
    todo_id: int = Path(..., ge=1),
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    try:
        return TodoEnvelope(todo=svc.update(todo_id, payload, actor_id=user.id))
    except DomainError as e:
        raise to_http_exception(e)


@router.delete(
    "/{todo_id}",
    summary="Supprimer un todo",
    description="Suppression définitive. Réservé au créateur.",
    response_model=MessageOut,
    responses={403: {"description": "Pas le créateur"}, 404: {"description": "Not Found"}},
)
def delete_todo(
    todo_id: int = Path(..., ge=1),
    user: User = Depends(get_current_user),
    svc: TodoService = Depends(get_todo_service),
):
    try:
        svc.delete(todo_id, actor_id=user.id)
    except DomainError as e:
        raise to_http_exception(e)
    return MessageOut(message="Todo deleted successfully")
