"""
➡️ But : Encapsuler toutes les opérations de base de données sur la table User.

Ne contient aucune logique métier, juste de la persistance.
"""

from __future__ import annotations

from typing import Optional, Sequence
from sqlalchemy import or_
from sqlmodel import select

from taskboard.db.repositories.base import BaseRepository
from taskboard.db.models.users import User

class UserRepository(BaseRepository[User]):
    """
    Repository pour la table User.
    Hérite du CRUD générique de BaseRepository.
    Contient uniquement les requêtes spécifiques à User.
    """
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        """Retourne un utilisateur par son nom d'utilisateur."""
        return self.session.exec(
            select(self.model).where(self.model.username == username)
        ).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(
            select(self.model).where(self.model.email == email.lower())
        ).first()

    def get_by_login(self, login: str) -> Optional[User]:
        """Connexion par username ou par email."""
        return self.get_by_username(login) or self.get_by_email(login)

    def search(self, text: str, *, exclude_id: int, limit: int) -> Sequence[User]:
        """
        Recherche insensible à la casse (sous-chaîne) sur username OU email.
        Les jokers LIKE (%, _) saisis par l'utilisateur sont échappés.
        """
        stmt = (
            select(self.model)
            .where(self.model.id != exclude_id)
            .where(
                or_(
                    self.model.username.icontains(text, autoescape=True),
                    self.model.email.icontains(text, autoescape=True),
                )
            )
            .order_by(self.model.username)
            .limit(limit)
        )
        return self.session.exec(stmt).all()
