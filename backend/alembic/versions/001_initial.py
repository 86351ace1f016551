"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('organisations',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_organisations_tenant_id'), 'organisations', ['tenant_id'], unique=False)

    op.create_table('system_devices',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('device_key', sa.String(length=64), nullable=False),
    sa.Column('hostname', sa.String(length=255), nullable=False),
    sa.Column('serial_number', sa.String(length=255), nullable=True),
    sa.Column('os_name', sa.String(length=100), nullable=True),
    sa.Column('os_version', sa.String(length=100), nullable=True),
    sa.Column('os_build', sa.String(length=100), nullable=True),
    sa.Column('ip_address', sa.String(length=45), nullable=True),
    sa.Column('last_boot_time', sa.DateTime(timezone=True), nullable=True),
    sa.Column('agent_version', sa.String(length=50), nullable=True),
    sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
    sa.Column('last_update_scan', sa.DateTime(timezone=True), nullable=True),
    sa.Column('compliance_status', sa.String(length=20), nullable=False),
    sa.Column('pending_critical_count', sa.Integer(), nullable=False),
    sa.Column('pending_total_count', sa.Integer(), nullable=False),
    sa.Column('failed_updates_count', sa.Integer(), nullable=False),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('organisation_id', sa.String(length=36), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['organisation_id'], ['organisations.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('device_key')
    )
    op.create_index('ix_system_devices_hostname', 'system_devices', ['hostname'], unique=False)
    op.create_index('ix_system_devices_tenant_org', 'system_devices', ['tenant_id', 'organisation_id'], unique=False)
    op.create_index('ix_system_devices_compliance', 'system_devices', ['compliance_status'], unique=False)

    op.create_table('system_updates',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('device_id', sa.String(length=36), nullable=False),
    sa.Column('kb_number', sa.String(length=50), nullable=False),
    sa.Column('title', sa.Text(), nullable=True),
    sa.Column('severity', sa.String(length=50), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('size_mb', sa.Float(), nullable=True),
    sa.Column('error_code', sa.String(length=50), nullable=True),
    sa.Column('detected_date', sa.DateTime(timezone=True), nullable=False),
    sa.Column('installed_date', sa.DateTime(timezone=True), nullable=True),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('organisation_id', sa.String(length=36), nullable=True),
    sa.ForeignKeyConstraint(['device_id'], ['system_devices.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('device_id', 'kb_number', name='uix_system_updates_device_kb')
    )
    op.create_index('ix_system_updates_status', 'system_updates', ['status'], unique=False)

    op.create_table('device_tasks',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('device_id', sa.String(length=36), nullable=False),
    sa.Column('task_type', sa.String(length=50), nullable=False),
    sa.Column('payload', sa.JSON(), nullable=True),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('claim_count', sa.Integer(), nullable=False),
    sa.Column('result', sa.JSON(), nullable=True),
    sa.Column('error_message', sa.Text(), nullable=True),
    sa.ForeignKeyConstraint(['device_id'], ['system_devices.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_device_tasks_device_status', 'device_tasks', ['device_id', 'status'], unique=False)

    op.create_table('device_heartbeats',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('device_id', sa.String(length=36), nullable=False),
    sa.Column('heartbeat_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('agent_version', sa.String(length=50), nullable=True),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('organisation_id', sa.String(length=36), nullable=True),
    sa.ForeignKeyConstraint(['device_id'], ['system_devices.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_device_heartbeats_device_at', 'device_heartbeats', ['device_id', 'heartbeat_at'], unique=False)

    op.create_table('update_rollout_jobs',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('tenant_id', sa.Integer(), nullable=False),
    sa.Column('organisation_id', sa.String(length=36), nullable=True),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('job_type', sa.String(length=20), nullable=False),
    sa.Column('target_type', sa.String(length=20), nullable=False),
    sa.Column('target_filter', sa.JSON(), nullable=False),
    sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('maintenance_window_start', sa.String(length=5), nullable=True),
    sa.Column('maintenance_window_end', sa.String(length=5), nullable=True),
    sa.Column('auto_reboot', sa.Boolean(), nullable=False),
    sa.Column('max_retries', sa.Integer(), nullable=False),
    sa.Column('rollback_on_failure', sa.Boolean(), nullable=False),
    sa.Column('requires_approval', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_update_rollout_jobs_status', 'update_rollout_jobs', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_update_rollout_jobs_status', table_name='update_rollout_jobs')
    op.drop_table('update_rollout_jobs')
    op.drop_index('ix_device_heartbeats_device_at', table_name='device_heartbeats')
    op.drop_table('device_heartbeats')
    op.drop_index('ix_device_tasks_device_status', table_name='device_tasks')
    op.drop_table('device_tasks')
    op.drop_index('ix_system_updates_status', table_name='system_updates')
    op.drop_table('system_updates')
    op.drop_index('ix_system_devices_compliance', table_name='system_devices')
    op.drop_index('ix_system_devices_tenant_org', table_name='system_devices')
    op.drop_index('ix_system_devices_hostname', table_name='system_devices')
    op.drop_table('system_devices')
    op.drop_index(op.f('ix_organisations_tenant_id'), table_name='organisations')
    op.drop_table('organisations')
