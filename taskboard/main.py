"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l’instance FastAPI (app).

Configure :

les logs,

CORS (autorisations de qui peut appeler ces API),

titre, version, tags,

les gestionnaires d'erreurs (toutes les erreurs -> {"message": "..."}),

schéma OpenAPI personnalisé.

Inclut les routers (/api/auth, /api/todos).

Initialise la base au démarrage (@app.on_event("startup")).

🔹 Avantages :

Centralise la configuration du serveur HTTP.

Point unique d’exécution : uvicorn taskboard.main:app --reload.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.core.config import settings
from taskboard.core.errors import DomainError
from taskboard.core.logging import setup_logger
from taskboard.core.openapi import custom_openapi
from taskboard.api.v1.errors import status_for
from taskboard.db.session import init_db

from taskboard.api.v1.routers import authentication, todos

import uvicorn

setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    openapi_tags=[
        {"name": "auth", "description": "Inscription, connexion, utilisateur courant"},
        {"name": "todos", "description": "Todos, assignation, tableau de bord et timeline"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

# Routers
app.include_router(authentication.router, prefix=settings.API_PREFIX)
app.include_router(todos.router, prefix=settings.API_PREFIX)


# -----------------------------
# Gestion des erreurs : corps {"message": "..."}
# -----------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": f"{field}: {message}" if field else message,
            "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
        },
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    code = status_for(exc)
    if code >= 500:
        logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content={"message": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Unexpected server error"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Unexpected server error"},
    )


# Génération du schéma OpenAPI custom (facultatif, mais propre)
app.openapi = lambda: custom_openapi(app)

# Démarrage
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)

if __name__ == "__main__":
    uvicorn.run("taskboard.main:app", host="127.0.0.1", port=5000, reload=(settings.ENV == "dev")) # http://localhost:5000
