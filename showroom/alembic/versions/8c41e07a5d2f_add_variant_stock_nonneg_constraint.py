"""add product_variants stock >= 0 constraint

Revision ID: 8c41e07a5d2f
Revises: 3f9a1c2d7b10
Create Date: 2026-10-09 17:40:02.552913
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c41e07a5d2f"
down_revision: Union[str, Sequence[str], None] = "3f9a1c2d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONSTRAINT_NAME = "ck_variant_stock_nonneg"
TABLE_NAME = "product_variants"


def upgrade() -> None:
    # Idempotent en Postgres (rejouable sans erreur)
    op.execute(f"""
    DO $$
    BEGIN
        IF NOT EXISTS (
            SELECT 1
            FROM pg_constraint c
            JOIN pg_class t ON t.oid = c.conrelid
            WHERE t.relname = '{TABLE_NAME}'
              AND c.conname = '{CONSTRAINT_NAME}'
        ) THEN
            ALTER TABLE {TABLE_NAME}
            ADD CONSTRAINT {CONSTRAINT_NAME}
            CHECK (stock >= 0);
        END IF;
    END $$;
    """)


def downgrade() -> None:
    op.execute(f"""
    ALTER TABLE {TABLE_NAME}
    DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME};
    """)
