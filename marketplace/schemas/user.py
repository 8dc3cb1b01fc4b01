from typing import Annotated
from pydantic import BaseModel, EmailStr, StringConstraints, field_validator


Username = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=30, pattern=r"^[a-zA-Z0-9]+$"),
]


class SignupPayload(BaseModel):
    """Форма регистрации"""
    username: Username
    email: EmailStr
    password: Annotated[str, StringConstraints(min_length=6, max_length=50)]

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoginPayload(BaseModel):
    """Форма входа"""
    username: Username
    password: Annotated[str, StringConstraints(min_length=1)]
