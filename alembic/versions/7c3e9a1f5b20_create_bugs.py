"""create_bugs

Revision ID: 7c3e9a1f5b20
Revises:
Create Date: 2026-10-18 10:00:00.000000

버그(bugs) 테이블 생성.
타임스탬프는 ms epoch BIGINT, impact/likelihood는 1~5 범위 제약.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "7c3e9a1f5b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bugs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("ticket", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("jira_link", sa.Text(), nullable=True),
        sa.Column("impact", sa.Integer(), nullable=False),
        sa.Column("likelihood", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(50), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("completed_at", sa.BigInteger(), nullable=True),
        sa.Column("reference", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.CheckConstraint("impact BETWEEN 1 AND 5", name="ck_bugs_impact_range"),
        sa.CheckConstraint("likelihood BETWEEN 1 AND 5", name="ck_bugs_likelihood_range"),
    )
    op.create_index("ix_bugs_created_at", "bugs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_bugs_created_at")
    op.drop_table("bugs")
