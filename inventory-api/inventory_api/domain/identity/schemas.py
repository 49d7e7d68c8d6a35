# inventory_api/domain/identity/schemas.py
from pydantic import EmailStr, Field, field_validator

from inventory_api.core.schemas import ApiModel
from inventory_api.db.models.users import Role


class UserRegister(ApiModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(min_length=6, max_length=72)
    role: Role = Role.CUSTOMER

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be between 2 and 100 characters")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserLogin(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class Identity(ApiModel):
    """Who is calling: resolved from the bearer token on every request."""

    id: int
    name: str
    email: str
    role: Role


class AuthOut(ApiModel):
    success: bool = True
    message: str
    data: Identity
    token: str
