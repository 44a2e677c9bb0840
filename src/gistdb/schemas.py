"""Input validation models."""

from pydantic import BaseModel, Field, field_validator

from .config import settings
from .models.user import User


class UserDTO(BaseModel):
    """Untrusted registration input, validated before a User is built."""

    username: str = Field(..., min_length=1, max_length=24, description="Login name")
    password: str = Field(..., min_length=1, description="Already hashed password")

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        if not (value.isascii() and value.isalnum()):
            raise ValueError("username must be alphanumeric")
        reserved = {name.lower() for name in settings.reserved_usernames}
        if value.lower() in reserved:
            raise ValueError("username is reserved")
        return value

    def to_user(self) -> User:
        return User(username=self.username, password=self.password)
