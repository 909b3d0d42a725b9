"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter une description détaillée (conventions de l'API),

déclarer le schéma d'authentification Bearer.

🔹 Avantages :

La doc est toujours complète et cohérente.
"""

from fastapi.openapi.utils import get_openapi


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de suivi de tâches multi-utilisateurs (FastAPI + SQLModel).\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Les clés JSON sont en camelCase (`assignedTo`, `dueDate`...).\n"
            "- Authentification : header `Authorization: Bearer <token>`.\n"
            "- Les erreurs renvoient `{\"message\": \"...\"}`.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
