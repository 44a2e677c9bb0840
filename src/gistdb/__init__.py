"""Data access for users of a gist-sharing application."""

from .database import Base, SessionLocal, engine, init_db
from .errors import ConflictError, GistDBError, NotFoundError, StoreError
from .models import Gist, SSHKey, User, likes
from .schemas import UserDTO

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "init_db",
    "ConflictError",
    "GistDBError",
    "NotFoundError",
    "StoreError",
    "Gist",
    "SSHKey",
    "User",
    "likes",
    "UserDTO",
]
