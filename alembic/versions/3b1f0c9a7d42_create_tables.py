"""create users, gists, ssh_keys and likes tables

Revision ID: 3b1f0c9a7d42
Revises: 
Create Date: 2026-10-18 09:12:40.518311

"""
from typing import Sequence, Union

from alembic import op
from gistdb import models  # noqa: F401
from gistdb.database import Base


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9a7d42'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema by creating all tables."""
    bind = op.get_bind()
    Base.metadata.create_all(bind)


def downgrade() -> None:
    """Downgrade schema by dropping all tables."""
    bind = op.get_bind()
    Base.metadata.drop_all(bind)
