"""Create parcels and paymentHistory tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Creates `parcels` (delivery records) and `paymentHistory` (append-only
       payment log), with the indexes used by the list endpoints.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "parcels",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False,
                  comment="Insertion sequence used for newest-first ordering"),
        sa.Column("id", sa.String(36), nullable=False, comment="Public parcel identifier (UUID)"),
        sa.Column("sender_name", sa.Text(), nullable=False),
        sa.Column("receiver_name", sa.Text(), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=True,
                  comment="Owner email; used as the list filter"),
        sa.Column("payment_status", sa.String(20), nullable=True,
                  comment="unpaid | paid; NULL until set"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True,
                  comment="When the parcel was marked paid"),
        sa.Column("extra", sa.JSON(), nullable=False, comment="Arbitrary client-supplied fields"),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("idx_parcels_user_email", "parcels", ["user_email"])

    op.create_table(
        "paymentHistory",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("parcelId", sa.String(64), nullable=True),
        sa.Column("userEmail", sa.String(320), nullable=True),
        sa.Column("amount", sa.JSON(), nullable=True),
        sa.Column("paymentIntentId", sa.String(255), nullable=True),
        sa.Column("paymentStatus", sa.String(20), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("idx_payment_history_user_email", "paymentHistory", ["userEmail"])
    op.create_index("idx_payment_history_created_at", "paymentHistory", ["createdAt"])


def downgrade() -> None:
    op.drop_index("idx_payment_history_created_at", table_name="paymentHistory")
    op.drop_index("idx_payment_history_user_email", table_name="paymentHistory")
    op.drop_table("paymentHistory")
    op.drop_index("idx_parcels_user_email", table_name="parcels")
    op.drop_table("parcels")
