"""Create person, relationship and merge_record tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-01-12 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from kinsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_GENDER = sa.Enum("male", "female", "unspecified", "other", name="gender", native_enum=False)
_RELATIONSHIP_TYPE = sa.Enum("parent_of", "spouse", name="relationshiptype", native_enum=False)
_PARENT_ROLE = sa.Enum("mother", "father", name="parentrole", native_enum=False)


def upgrade() -> None:
    op.create_table(
        "person",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("birth_date", sa.String(length=10), nullable=True),
        sa.Column("death_date", sa.String(length=10), nullable=True),
        sa.Column("gender", _GENDER, nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("birth_surname", sa.String(), nullable=True),
        sa.Column("nickname", sa.String(), nullable=True),
        sa.Column("is_protected", sa.Boolean(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_person")),
    )
    op.create_index(op.f("ix_person_owner_id"), "person", ["owner_id"])

    op.create_table(
        "relationship",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.Column("person1_id", sa.Uuid(), nullable=False),
        sa.Column("person2_id", sa.Uuid(), nullable=False),
        sa.Column("type", _RELATIONSHIP_TYPE, nullable=False),
        sa.Column("parent_role", _PARENT_ROLE, nullable=True),
        sa.ForeignKeyConstraint(
            ["person1_id"],
            ["person.id"],
            name=op.f("fk_relationship_person1_id_person"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["person2_id"],
            ["person.id"],
            name=op.f("fk_relationship_person2_id_person"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_relationship")),
    )
    op.create_index(op.f("ix_relationship_person1_id"), "relationship", ["person1_id"])
    op.create_index(op.f("ix_relationship_person2_id"), "relationship", ["person2_id"])
    op.create_index(
        "uq_relationship_parent_role",
        "relationship",
        ["person2_id", "parent_role"],
        unique=True,
        sqlite_where=sa.text("type = 'parent_of'"),
        postgresql_where=sa.text("type = 'parent_of'"),
    )
    op.create_index(
        "uq_relationship_spouse_pair",
        "relationship",
        ["person1_id", "person2_id"],
        unique=True,
        sqlite_where=sa.text("type = 'spouse'"),
        postgresql_where=sa.text("type = 'spouse'"),
    )

    op.create_table(
        "merge_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=False),
        sa.Column("target_id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("relationships_transferred", sa.Integer(), nullable=False),
        sa.Column("relationships_deduplicated", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_merge_record")),
    )
    op.create_index(op.f("ix_merge_record_target_id"), "merge_record", ["target_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_merge_record_target_id"), table_name="merge_record")
    op.drop_table("merge_record")
    op.drop_index("uq_relationship_spouse_pair", table_name="relationship")
    op.drop_index("uq_relationship_parent_role", table_name="relationship")
    op.drop_index(op.f("ix_relationship_person2_id"), table_name="relationship")
    op.drop_index(op.f("ix_relationship_person1_id"), table_name="relationship")
    op.drop_table("relationship")
    op.drop_index(op.f("ix_person_owner_id"), table_name="person")
    op.drop_table("person")
