"""Mapped classes; importing this package registers every table on Base.metadata."""

from .like import likes
from .user import User
from .gist import Gist
from .ssh_key import SSHKey

__all__ = ["likes", "User", "Gist", "SSHKey"]
