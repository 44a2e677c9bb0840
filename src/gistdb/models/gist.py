import time
from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base
from .like import likes as likes_table


def _now() -> int:
    return int(time.time())


class Gist(Base):
    """SQLAlchemy model for a gist and its denormalized like/fork counters."""

    __tablename__ = "gists"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String, unique=True, index=True, nullable=False, default=lambda: uuid4().hex)
    title = Column(String, default="", nullable=False)
    description = Column(Text, default="", nullable=False)
    private = Column(Integer, default=0, nullable=False)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE", onupdate="CASCADE"),
        index=True,
        nullable=False,
    )
    forked_id = Column(
        Integer,
        ForeignKey("gists.id", ondelete="SET NULL", onupdate="CASCADE"),
        index=True,
        nullable=True,
    )
    nb_files = Column(Integer, default=0, nullable=False)
    nb_likes = Column(Integer, default=0, nullable=False)
    nb_forks = Column(Integer, default=0, nullable=False)
    created_at = Column(Integer, default=_now, nullable=False)
    updated_at = Column(Integer, default=_now, onupdate=_now, nullable=False)

    user = relationship("User", back_populates="gists")
    likes = relationship(
        "User",
        secondary=likes_table,
        back_populates="liked",
        passive_deletes=True,
    )
    forked = relationship("Gist", remote_side=[id], back_populates="forks")
    forks = relationship("Gist", back_populates="forked", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Gist id={self.id} uuid={self.uuid!r} user_id={self.user_id}>"
