"""categories, consumed_in_manufacturing

Revision ID: c5d81f3a9e20
Revises: a1c4e2f0b7d3
Create Date: 2025-11-14 16:40:08.517329

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "c5d81f3a9e20"
down_revision: Union[str, Sequence[str], None] = "a1c4e2f0b7d3"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_categories_slug"), "categories", ["slug"], unique=True)

    with op.batch_alter_table("raw_material_transfers") as batch_op:
        batch_op.add_column(
            sa.Column("consumed_in_manufacturing", sa.Boolean(), server_default=sa.text("false"), nullable=False)
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("raw_material_transfers") as batch_op:
        batch_op.drop_column("consumed_in_manufacturing")

    op.drop_index(op.f("ix_categories_slug"), table_name="categories")
    op.drop_table("categories")
