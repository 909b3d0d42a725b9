"""
➡️ But : Définir la structure des tables de la base (ORM).

Représente les objets persistés. Ici on représente les tables ayant un rapport avec les users.

Chaque champ = une colonne SQL (avec type, index, clé primaire...).
"""

from sqlmodel import Field

from .base import BaseModelDB

class User(BaseModelDB, table=True):
    username: str = Field(index=True, unique=True, max_length=64)
    email: str = Field(index=True, unique=True, max_length=254)
    hashed_password: str
