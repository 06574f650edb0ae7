"""Create user and supplier category tables.

- user_categories
- supplier_categories

Both carry an optimistic-concurrency ``version`` column starting at 1 and
timestamps filled by the database clock.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d2e4f5a60"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATEGORY_TABLES = ("user_categories", "supplier_categories")


def _create_category_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=255), server_default="", nullable=False),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
        sa.CheckConstraint("version >= 0", name=f"ck_{name}_version_non_negative"),
    )


def upgrade() -> None:
    for name in CATEGORY_TABLES:
        _create_category_table(name)


def downgrade() -> None:
    for name in reversed(CATEGORY_TABLES):
        op.drop_table(name)
