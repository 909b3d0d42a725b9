import logging

from jose import JWTError

from taskboard.core.errors import AuthenticationError, ConflictError
from taskboard.db.models.users import User
from taskboard.db.repositories.users import UserRepository
from taskboard.security.password import verify_password, hash_password
from taskboard.security.tokens import (
    JWTSettings,
    create_access_token,
    decode_token,
)
from taskboard.features.authentication.schemas import (
    AuthOut,
    LoginIn,
    RegisterIn,
)
from taskboard.features.users.schemas import UserSummary

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service d'authentification : orchestre le repository User + les tokens.
    Ne contient pas d'accès SQL direct ; lève des erreurs métier (401 / 409).
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        jwt_settings: JWTSettings,
    ):
        self.user_repo = user_repo
        self.jwt = jwt_settings

    def _auth_out(self, user: User) -> AuthOut:
        return AuthOut(
            token=create_access_token(user_id=user.id, username=user.username, settings=self.jwt),
            token_type="bearer",
            expires_in=int(self.jwt.access_ttl.total_seconds()),
            user=UserSummary.model_validate(user),
        )

    # ---------- Register ----------
    def register(self, payload: RegisterIn) -> AuthOut:
        if self.user_repo.get_by_username(payload.username):
            raise ConflictError("Username already exists")
        if self.user_repo.get_by_email(payload.email):
            raise ConflictError("Email already registered")
        user = self.user_repo.create(
            username=payload.username,
            email=payload.email,
            hashed_password=hash_password(payload.password),
        )
        logger.info("User %s registered (id=%s)", user.username, user.id)
        return self._auth_out(user)

    # ---------- Login ----------
    def login(self, payload: LoginIn) -> AuthOut:
        user = self.user_repo.get_by_login(payload.login)
        if not user or not verify_password(payload.password, user.hashed_password):
            # Ne pas révéler si l'utilisateur existe
            raise AuthenticationError("Invalid credentials")
        return self._auth_out(user)

    # ---------- Current user depuis access token ----------
    def get_current_user(self, *, access_token: str) -> User:
        try:
            decoded = decode_token(access_token, self.jwt)
        except JWTError:
            raise AuthenticationError("Invalid token") from None

        if decoded.get("typ") != "access":
            raise AuthenticationError("Invalid token type")

        user = self.user_repo.get(int(decoded["sub"]))
        if not user:
            raise AuthenticationError("User not found")
        return user
