"""initial print order schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the QuickPrint schema from scratch:
- job_groups: Customer orders (paid together) with the summary ledger
- jobs: Uploaded documents with their print recipe and queue status
- daily_summary: One archived row per calendar date
- system_status: Singleton shop online/offline flag
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # job_groups: one customer order
    # ============================================================================
    op.create_table(
        'job_groups',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_label', sa.String(length=255), nullable=True),
        sa.Column('total_price_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='unpaid'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('summary_date', sa.Date(), nullable=True),
        sa.Column('summarized_users', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('summarized_docs', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('summarized_income_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('archived_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("payment_status IN ('unpaid', 'paid')", name='ck_job_groups_payment_status'),
    )
    op.create_index('ix_job_groups_payment_status', 'job_groups', ['payment_status'])
    op.create_index('ix_job_groups_created_at', 'job_groups', ['created_at'])

    # ============================================================================
    # jobs: one document in an order
    # ============================================================================
    op.create_table(
        'jobs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('job_group_id', sa.String(length=36), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size_bytes', sa.BigInteger(), nullable=True),
        sa.Column('storage_path', sa.String(length=512), nullable=False),
        sa.Column('total_pages', sa.Integer(), nullable=False),
        # Print recipe (NULL until configured)
        sa.Column('pages', sa.String(length=255), nullable=True),
        sa.Column('color_mode', sa.String(length=16), nullable=True),
        sa.Column('sides', sa.String(length=16), nullable=True),
        sa.Column('copies', sa.Integer(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='unpaid'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='queued'),
        sa.Column('in_summary', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('printed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default=sa.text('1')),
        sa.ForeignKeyConstraint(['job_group_id'], ['job_groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('queued', 'processing', 'printed', 'ready')", name='ck_jobs_status'),
        sa.CheckConstraint("copies IS NULL OR (copies >= 1 AND copies <= 100)", name='ck_jobs_copies_range'),
    )
    op.create_index('ix_jobs_job_group_id', 'jobs', ['job_group_id'])
    op.create_index('ix_jobs_status', 'jobs', ['status'])
    op.create_index('ix_jobs_created_at', 'jobs', ['created_at'])

    # ============================================================================
    # daily_summary: archived totals per date
    # ============================================================================
    op.create_table(
        'daily_summary',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('total_users', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_docs', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_income_cents', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_daily_summary_date', 'daily_summary', ['date'], unique=True)

    # ============================================================================
    # system_status: singleton shop flag
    # ============================================================================
    op.create_table(
        'system_status',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('on_off', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('on_off IN (0, 1)', name='ck_system_status_on_off'),
    )
    op.execute("INSERT INTO system_status (id, on_off) VALUES (1, 0)")


def downgrade():
    op.drop_table('system_status')
    op.drop_index('ix_daily_summary_date', table_name='daily_summary')
    op.drop_table('daily_summary')
    op.drop_index('ix_jobs_created_at', table_name='jobs')
    op.drop_index('ix_jobs_status', table_name='jobs')
    op.drop_index('ix_jobs_job_group_id', table_name='jobs')
    op.drop_table('jobs')
    op.drop_index('ix_job_groups_created_at', table_name='job_groups')
    op.drop_index('ix_job_groups_payment_status', table_name='job_groups')
    op.drop_table('job_groups')
