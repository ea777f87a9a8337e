"""initial content schema (person, period, achievement, person_edit)

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

PERSON_ID_LENGTH = 100


def _status() -> sa.Enum:
    return sa.Enum(
        "DRAFT", "PENDING", "APPROVED", "REJECTED", name="contentstatus", native_enum=False
    )


def _moderation_columns() -> list[sa.Column[object]]:
    return [
        sa.Column("status", _status(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _moderation_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_status", table, ["status"], unique=False)
    op.create_index(f"ix_{table}_created_by", table, ["created_by"], unique=False)


def upgrade() -> None:
    op.create_table(
        "person",
        sa.Column("id", sa.String(length=PERSON_ID_LENGTH), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("birth_year", sa.Integer(), nullable=False),
        sa.Column("death_year", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("wiki_link", sa.String(), nullable=True),
        *_moderation_columns(),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("review_comment", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("birth_year <= death_year", name="ck_person_lifespan"),
        sa.PrimaryKeyConstraint("id", name="pk_person"),
    )
    _moderation_indexes("person")

    op.create_table(
        "period",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.String(length=PERSON_ID_LENGTH), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.Column("start_year", sa.Integer(), nullable=False),
        sa.Column("end_year", sa.Integer(), nullable=False),
        sa.Column(
            "period_type",
            sa.Enum("LIFE", "RULER", "OTHER", name="periodtype", native_enum=False),
            nullable=False,
        ),
        sa.Column("comment", sa.Text(), nullable=True),
        *_moderation_columns(),
        sa.CheckConstraint("start_year <= end_year", name="ck_period_interval"),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_period_period_person_id_person",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_period"),
    )
    op.create_index("ix_period_person_id", "period", ["person_id"], unique=False)
    _moderation_indexes("period")

    op.create_table(
        "achievement",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.String(length=PERSON_ID_LENGTH), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("wikipedia_url", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        *_moderation_columns(),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_achievement_achievement_person_id_person",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_achievement"),
    )
    op.create_index("ix_achievement_person_id", "achievement", ["person_id"], unique=False)
    _moderation_indexes("achievement")

    op.create_table(
        "person_edit",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_id", sa.String(length=PERSON_ID_LENGTH), nullable=False),
        sa.Column("proposer_user_id", sa.Integer(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("status", _status(), nullable=False),
        sa.Column("review_comment", sa.Text(), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["person.id"],
            name="fk_person_edit_person_edit_person_id_person",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_person_edit"),
    )
    op.create_index("ix_person_edit_person_id", "person_edit", ["person_id"], unique=False)
    op.create_index("ix_person_edit_status", "person_edit", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_person_edit_status", table_name="person_edit")
    op.drop_index("ix_person_edit_person_id", table_name="person_edit")
    op.drop_table("person_edit")
    for table in ("achievement", "period", "person"):
        op.drop_index(f"ix_{table}_created_by", table_name=table)
        op.drop_index(f"ix_{table}_status", table_name=table)
    op.drop_index("ix_achievement_person_id", table_name="achievement")
    op.drop_table("achievement")
    op.drop_index("ix_period_person_id", table_name="period")
    op.drop_table("period")
    op.drop_table("person")
