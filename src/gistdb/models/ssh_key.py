import time

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class SSHKey(Base):
    """Public SSH key registered by a user for git access over SSH."""

    __tablename__ = "ssh_keys"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    sha = Column(String, index=True, nullable=False)
    created_at = Column(Integer, default=lambda: int(time.time()), nullable=False)
    last_used_at = Column(Integer, nullable=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    user = relationship("User", back_populates="ssh_keys")
