"""Initial schema: records, projects, caller_devices

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('config', sa.JSON(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        'caller_devices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('imei', sa.String(120), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('brand', sa.String(120), nullable=False),
        sa.Column('model', sa.String(120)),
        sa.Column('phone_number', sa.String(60)),
        sa.Column('project_id', sa.Integer(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_caller_devices_imei', 'caller_devices', ['imei'], unique=True)

    op.create_table(
        'records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('file', sa.String(1024), nullable=False),
        sa.Column('user', sa.String(120), nullable=False),
        sa.Column('caller_id', sa.String(120), nullable=False),
        sa.Column('type', sa.String(60), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=True),
        sa.Column('target_name', sa.String(255)),
        sa.Column('target_number', sa.String(60)),
        sa.Column('transcription', sa.Text(), nullable=False, server_default=''),
        sa.Column('transcribed', sa.Boolean(), nullable=True),
        sa.Column('success_sell', sa.Boolean(), nullable=True),
        sa.Column('amount_to_pay', sa.Float(), nullable=True),
        sa.Column('reason_fail', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_records_file', 'records', ['file'], unique=True)
    op.create_index('ix_records_caller_id', 'records', ['caller_id'])
    op.create_index('ix_records_timestamp', 'records', ['timestamp'])


def downgrade() -> None:
    op.drop_index('ix_records_timestamp', table_name='records')
    op.drop_index('ix_records_caller_id', table_name='records')
    op.drop_index('ix_records_file', table_name='records')
    op.drop_table('records')
    op.drop_index('ix_caller_devices_imei', table_name='caller_devices')
    op.drop_table('caller_devices')
    op.drop_table('projects')
