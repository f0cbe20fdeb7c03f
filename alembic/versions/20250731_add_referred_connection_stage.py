"""add referred connection stage

Revision ID: 20250731_add_referred_connection_stage
Revises: 20250730_initial_referral_schema
Create Date: 2025-07-31 02:44:31.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20250731_add_referred_connection_stage"
down_revision: Union[str, None] = "20250730_initial_referral_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # A new enum value cannot be used in the transaction that adds it.
    with op.get_context().autocommit_block():
        op.execute(
            "ALTER TYPE referral_stage ADD VALUE IF NOT EXISTS "
            "'Referred Connection' BEFORE 'Client Signed'"
        )
    op.execute(
        "ALTER TABLE public.referrals ALTER COLUMN stage SET DEFAULT 'Referred Connection'"
    )


def downgrade() -> None:
    # Postgres cannot drop an enum value; only the default is restored.
    op.execute(
        "ALTER TABLE public.referrals ALTER COLUMN stage SET DEFAULT 'Client Signed'"
    )
