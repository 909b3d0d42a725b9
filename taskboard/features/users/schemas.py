"""
➡️ But : Formats de sortie liés aux utilisateurs.

UserSummary → ce que l'API expose d'un utilisateur (jamais le hash du mot de passe).
"""

from typing import List

from pydantic import BaseModel


class UserSummary(BaseModel):
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class UserSearchOut(BaseModel):
    users: List[UserSummary]
