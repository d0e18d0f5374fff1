"""Add recipe fields to cards and the ingredients table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from alembic import op

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("""
        ALTER TABLE cards
            ADD COLUMN IF NOT EXISTS status TEXT NOT NULL DEFAULT 'DORMANT'
                CHECK (status IN ('DORMANT', 'FULLY_STOCKED', 'LOW_STOCK', 'OUT_OF_STOCK')),
            ADD COLUMN IF NOT EXISTS instructions TEXT[] NOT NULL DEFAULT '{}',
            ADD COLUMN IF NOT EXISTS labels TEXT[] NOT NULL DEFAULT '{}'
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS ingredients (
            id TEXT PRIMARY KEY,
            card_id TEXT NOT NULL REFERENCES cards(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            quantity DOUBLE PRECISION NOT NULL CHECK (quantity >= 0),
            unit TEXT NOT NULL
                CHECK (unit IN ('G', 'KG', 'ML', 'L', 'TSP', 'TBSP', 'CUP', 'PIECE', 'PINCH')),
            position INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ingredients_card_id_idx ON ingredients (card_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ingredients")
    op.execute("ALTER TABLE cards DROP COLUMN IF EXISTS labels")
    op.execute("ALTER TABLE cards DROP COLUMN IF EXISTS instructions")
    op.execute("ALTER TABLE cards DROP COLUMN IF EXISTS status")
