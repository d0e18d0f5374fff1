"""Unique, non-negative order within each sibling set

Deferred so a reorder batch can permute positions inside one transaction.

Revision ID: 003
Revises: 002
Create Date: 2026-10-19

"""
from alembic import op

revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("""
        ALTER TABLE columns
            ADD CONSTRAINT columns_order_nonnegative CHECK ("order" >= 0),
            ADD CONSTRAINT columns_board_order_key UNIQUE (board_id, "order")
                DEFERRABLE INITIALLY DEFERRED
    """)
    op.execute("""
        ALTER TABLE cards
            ADD CONSTRAINT cards_order_nonnegative CHECK ("order" >= 0),
            ADD CONSTRAINT cards_column_order_key UNIQUE (column_id, "order")
                DEFERRABLE INITIALLY DEFERRED
    """)


def downgrade() -> None:
    op.execute("ALTER TABLE cards DROP CONSTRAINT IF EXISTS cards_column_order_key")
    op.execute("ALTER TABLE cards DROP CONSTRAINT IF EXISTS cards_order_nonnegative")
    op.execute("ALTER TABLE columns DROP CONSTRAINT IF EXISTS columns_board_order_key")
    op.execute("ALTER TABLE columns DROP CONSTRAINT IF EXISTS columns_order_nonnegative")
