"""structured payment details

Revision ID: 20250801_structured_payment_details
Revises: 20250731_add_referred_connection_stage
Create Date: 2025-08-01 03:02:47.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20250801_structured_payment_details"
down_revision: Union[str, None] = "20250731_add_referred_connection_stage"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        """
        ALTER TABLE public.profiles
          DROP COLUMN IF EXISTS bank_details,
          ADD COLUMN payment_method TEXT
            CHECK (payment_method IN ('zelle', 'paypal', 'bank_transfer')),
          ADD COLUMN payment_details JSONB
        """
    )
    op.execute(
        """
        COMMENT ON COLUMN public.profiles.payment_details IS
        'Payment details keyed by payment_method:
        - zelle: {"email_or_phone": "value"}
        - paypal: {"email": "value"}
        - bank_transfer: {"full_name": "value", "bank_name": "value", "account_number": "value", "routing_number": "value"}'
        """
    )


def downgrade() -> None:
    op.execute(
        """
        ALTER TABLE public.profiles
          DROP COLUMN IF EXISTS payment_details,
          DROP COLUMN IF EXISTS payment_method,
          ADD COLUMN bank_details TEXT
        """
    )
