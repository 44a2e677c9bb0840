from sqlalchemy import Column, ForeignKey, Integer, Table

from ..database import Base

# Many-to-many association between users and the gists they liked.
likes = Table(
    "likes",
    Base.metadata,
    Column(
        "user_id",
        Integer,
        ForeignKey("users.id", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    ),
    Column(
        "gist_id",
        Integer,
        ForeignKey("gists.id", ondelete="CASCADE", onupdate="CASCADE"),
        primary_key=True,
    ),
)
