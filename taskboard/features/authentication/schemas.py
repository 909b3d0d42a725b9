from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from taskboard.features.users.schemas import UserSummary

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# ---------- Inputs ----------

class RegisterIn(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: str = Field(max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        return value.strip()

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()

class LoginIn(BaseModel):
    # username OU email
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def _has_login(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self

    @property
    def login(self) -> str:
        return (self.username or self.email or "").strip()


# ---------- Outputs ----------

class AuthOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int  # secondes (durée de l'access token)
    user: UserSummary
