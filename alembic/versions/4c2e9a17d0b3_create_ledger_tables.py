"""create_ledger_tables

Revision ID: 4c2e9a17d0b3
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c2e9a17d0b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'contribution',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_name', sa.String(length=200), nullable=False),
        sa.Column('file_number', sa.String(length=50), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category', sa.Enum('Monthly Contribution', 'Direct Credit', 'Credited from Camp', name='contributioncategory', native_enum=False), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('previous_payment', sa.Numeric(14, 2), nullable=True),
        sa.Column('entry_sequence', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contribution_file_number', 'contribution', ['file_number'])
    op.create_index('ix_contribution_date', 'contribution', ['date'])
    op.create_index('ix_contribution_entry_sequence', 'contribution', ['entry_sequence'])
    op.create_index('idx_contribution_member_date', 'contribution', ['file_number', 'date'])

    op.create_table(
        'loan',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('member_name', sa.String(length=200), nullable=False),
        sa.Column('file_number', sa.String(length=50), nullable=False),
        sa.Column('principal', sa.Numeric(14, 2), nullable=False),
        sa.Column('interest_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'COMPLETED', name='loanstatus', native_enum=False), nullable=False),
        sa.Column('repaid_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_loan_file_number', 'loan', ['file_number'])

    op.create_table(
        'system_settings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('setting_type', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_system_settings_setting_key', 'system_settings', ['setting_key'], unique=True)

    op.create_table(
        'ai_audit_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('query_text', sa.Text(), nullable=False),
        sa.Column('tool_calls', sa.JSON(), nullable=True),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ai_audit_log_timestamp', 'ai_audit_log', ['timestamp'])


def downgrade() -> None:
    op.drop_index('ix_ai_audit_log_timestamp', table_name='ai_audit_log')
    op.drop_table('ai_audit_log')
    op.drop_index('ix_system_settings_setting_key', table_name='system_settings')
    op.drop_table('system_settings')
    op.drop_index('ix_loan_file_number', table_name='loan')
    op.drop_table('loan')
    op.drop_index('idx_contribution_member_date', table_name='contribution')
    op.drop_index('ix_contribution_entry_sequence', table_name='contribution')
    op.drop_index('ix_contribution_date', table_name='contribution')
    op.drop_index('ix_contribution_file_number', table_name='contribution')
    op.drop_table('contribution')
