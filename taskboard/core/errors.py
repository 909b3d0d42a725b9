"""
➡️ But : Définir les erreurs métier levées par les services.

Les services ne connaissent pas HTTP : ils lèvent ces exceptions,
et les routers les traduisent en codes HTTP (400 / 403 / 404 / 500).

🔹 Avantages :

Code métier testable sans FastAPI.

Un seul endroit pour la correspondance erreur -> statut.
"""


class DomainError(Exception):
    """Erreur métier avec un message lisible par le client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError, ValueError):
    """Entrée invalide (champ vide, trop long, valeur hors enum...)."""


class NotFoundError(DomainError, LookupError):
    pass


class TodoNotFoundError(NotFoundError):
    """La ressource principale (le todo) n'existe pas -> 404."""

    def __init__(self, message: str = "Todo not found"):
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    """Un utilisateur référencé (assignee) n'existe pas -> 400."""

    def __init__(self, message: str = "Assigned user not found"):
        super().__init__(message)


class AuthorizationError(DomainError):
    """L'acteur n'a pas la relation requise avec le todo -> 403."""


class ConflictError(DomainError):
    """Ressource déjà existante (ex: username pris) -> 409."""


class UnexpectedError(DomainError):
    pass


class AuthenticationError(DomainError):
    """Identifiants ou token invalides -> 401."""
