from fastapi import APIRouter, Depends, status

from taskboard.api.v1.dependencies import get_auth_service, get_current_user
from taskboard.api.v1.errors import to_http_exception
from taskboard.core.errors import DomainError
from taskboard.db.models.users import User
from taskboard.features.authentication.services import AuthService
from taskboard.features.authentication.schemas import AuthOut, LoginIn, RegisterIn
from taskboard.features.users.schemas import UserSummary  # pour /me

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)

# -----------------------------
# Register
# -----------------------------
@router.post(
    "/register",
    summary="Créer un compte",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthOut,
    responses={409: {"description": "Username ou email déjà utilisé"}},
)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    try:
        return svc.register(payload)
    except DomainError as e:
        raise to_http_exception(e)

# -----------------------------
# Login
# -----------------------------
@router.post(
    "/login",
    summary="Se connecter",
    description="Connexion par username ou email. Retourne un access token Bearer.",
    response_model=AuthOut,
    responses={401: {"description": "Identifiants invalides"}},
)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    try:
        return svc.login(payload)
    except DomainError as e:
        raise to_http_exception(e)

# -----------------------------
# Me (profil courant)
# -----------------------------
@router.get(
    "/me",
    summary="Récupérer l'utilisateur courant",
    response_model=UserSummary,
    responses={401: {"description": "Token invalide ou expiré"}},
)
def me(user: User = Depends(get_current_user)):
    return user
