"""add admin_notes to scholarships

Revision ID: 8c2d9e0f1a3b
Revises: 4f1a2b3c5d6e
Create Date: 2026-01-14 19:56:23.114870

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8c2d9e0f1a3b'
down_revision: Union[str, Sequence[str], None] = '4f1a2b3c5d6e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    cols = {c["name"] for c in inspector.get_columns("scholarships")}
    if "admin_notes" not in cols:
        op.add_column("scholarships", sa.Column("admin_notes", sa.String(1000), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("scholarships") as batch_op:
        batch_op.drop_column("admin_notes")
