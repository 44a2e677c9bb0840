import hashlib
import secrets
import time

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from ..database import Base
from .like import likes


def avatar_hash(email: str | None) -> str:
    """Return the md5 hex digest used for avatar lookup.

    Without an email the digest is taken over random bytes so that every
    user still gets a distinct generated avatar.
    """
    if email:
        data = email.strip().lower().encode("utf-8")
    else:
        data = secrets.token_bytes(16)
    return hashlib.md5(data).hexdigest()


class User(Base):
    """SQLAlchemy model for application users."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False, default="")
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(Integer, default=lambda: int(time.time()), nullable=False)
    email = Column(String, default="", nullable=False)
    md5_hash = Column(String, nullable=False, default="")

    # Rows in gists, ssh_keys and likes are removed by ON DELETE CASCADE.
    gists = relationship(
        "Gist",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    ssh_keys = relationship(
        "SSHKey",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    liked = relationship(
        "Gist",
        secondary=likes,
        back_populates="likes",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
