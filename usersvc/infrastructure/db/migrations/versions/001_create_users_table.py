"""Create the users table and its country index.

Revision ID: 001_create_users_table
Revises: None
Create Date: 2026-10-16

Both objects are created only when missing so databases provisioned
before migrations existed can be upgraded in place.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_create_users_table"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

_TABLE = "users"
_COUNTRY_INDEX = "idx_users_country"


def upgrade() -> None:
    inspector = sa.inspect(op.get_bind())

    if not inspector.has_table(_TABLE):
        op.create_table(
            _TABLE,
            sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
            sa.Column("first_name", sa.String(256), nullable=False),
            sa.Column("last_name", sa.String(256), nullable=False),
            sa.Column("nickname", sa.String(256), nullable=False),
            sa.Column("password", sa.String(256), nullable=False),
            sa.Column("email", sa.String(256), nullable=False, unique=True),
            sa.Column("country", sa.String(256), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )

    existing = {index["name"] for index in inspector.get_indexes(_TABLE)}
    if _COUNTRY_INDEX not in existing:
        op.create_index(_COUNTRY_INDEX, _TABLE, ["country"])


def downgrade() -> None:
    op.drop_index(_COUNTRY_INDEX, table_name=_TABLE)
    op.drop_table(_TABLE)
