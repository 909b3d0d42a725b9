"""
➡️ But : Centraliser tous les paramètres configurables (nom d’app, chemin DB, secrets, logs, etc.)

Utilise pydantic-settings pour charger automatiquement les variables d’environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from taskboard.core.config import settings
print(settings.APP_NAME)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from datetime import timedelta
from typing import List, Optional

from pydantic_settings import BaseSettings
from taskboard.security.tokens import JWTSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Taskboard"
    ENV: str = "dev"  # dev | prod | test
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]  # En prod, mettre l'URL du front

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "taskboard.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "taskboard-api"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60 * 24

    # -----------------------------
    # Logs
    # -----------------------------
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # ex: "logs/taskboard.log"

    # -----------------------------
    # Todos
    # -----------------------------
    ANALYTICS_DEFAULT_PERIOD_DAYS: int = 30
    USER_SEARCH_MIN_CHARS: int = 2
    USER_SEARCH_LIMIT: int = 10

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")


# Instance globale importable partout
settings = Settings()

# Objet JWT prêt à l'emploi pour les services
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
)
