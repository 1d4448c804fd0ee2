"""Create identity, user profile, user request, budget tracking and audit_logs tables

Revision ID: 3b4c5d6e7f80
Revises: 2a3b4c5d6e7f
Create Date: 2025-03-10 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql # For JSONB

# revision identifiers, used by Alembic.
revision = '3b4c5d6e7f80'
down_revision = '2a3b4c5d6e7f'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('auth_identities',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('email_confirmed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_auth_identities'))
    )
    op.create_index(op.f('ix_auth_identities_email'), 'auth_identities', ['email'], unique=True)

    op.create_table('user_profiles',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('crm', sa.String(length=50), nullable=True),
        sa.Column('specialty', sa.String(length=255), nullable=True),
        sa.Column('doctor_id', sa.String(length=36), nullable=True),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_profiles')),
        sa.CheckConstraint("role IN ('admin', 'doctor', 'secretary')", name='ck_user_profiles_role_valid')
    )
    op.create_index(op.f('ix_user_profiles_user_id'), 'user_profiles', ['user_id'], unique=True)
    op.create_index(op.f('ix_user_profiles_email'), 'user_profiles', ['email'], unique=True)
    op.create_index(op.f('ix_user_profiles_role'), 'user_profiles', ['role'], unique=False)
    op.create_index(op.f('ix_user_profiles_doctor_id'), 'user_profiles', ['doctor_id'], unique=False)

    op.create_table('user_surgery_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_profile_id', sa.String(length=36), nullable=False),
        sa.Column('patient_name', sa.String(length=255), nullable=False),
        sa.Column('patient_cpf', sa.String(length=14), nullable=False),
        sa.Column('patient_birth_date', sa.Date(), nullable=False),
        sa.Column('patient_contact', sa.String(length=100), nullable=False),
        sa.Column('procedure_description', sa.Text(), nullable=False),
        sa.Column('urgency_level', sa.String(length=10), server_default='medium', nullable=False),
        sa.Column('preferred_date', sa.Date(), nullable=True),
        sa.Column('observations', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_profile_id'], ['user_profiles.id'], name=op.f('fk_user_surgery_requests_user_profile_id_user_profiles')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_surgery_requests'))
    )
    op.create_index(op.f('ix_user_surgery_requests_user_profile_id'), 'user_surgery_requests', ['user_profile_id'], unique=False)
    op.create_index(op.f('ix_user_surgery_requests_status'), 'user_surgery_requests', ['status'], unique=False)

    op.create_table('user_budget_tracking',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('surgery_request_id', sa.String(length=36), nullable=False),
        sa.Column('budget_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=30), server_default='in_progress', nullable=False),
        sa.Column('user_approval', sa.String(length=30), nullable=True),
        sa.Column('user_feedback', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['surgery_request_id'], ['user_surgery_requests.id'], name=op.f('fk_user_budget_tracking_surgery_request_id_user_surgery_requests')),
        sa.ForeignKeyConstraint(['budget_id'], ['budgets.id'], name=op.f('fk_user_budget_tracking_budget_id_budgets')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_budget_tracking')),
        sa.CheckConstraint(
            "status IN ('in_progress', 'awaiting_patient', 'approved', 'revision_requested', 'rejected')",
            name='ck_user_budget_tracking_status_valid'
        )
    )
    op.create_index(op.f('ix_user_budget_tracking_surgery_request_id'), 'user_budget_tracking', ['surgery_request_id'], unique=False)
    op.create_index(op.f('ix_user_budget_tracking_budget_id'), 'user_budget_tracking', ['budget_id'], unique=False)
    op.create_index(op.f('ix_user_budget_tracking_status'), 'user_budget_tracking', ['status'], unique=False)

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=True),
        sa.Column('action', sa.String(length=255), nullable=False),
        sa.Column('resource', sa.String(length=255), nullable=True),
        sa.Column('resource_id', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=100), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_fallback=True), nullable=True), # Use JSONB for PostgreSQL
        sa.PrimaryKeyConstraint('id', name=op.f('pk_audit_logs'))
    )
    op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)
    op.create_index(op.f('ix_audit_logs_timestamp'), 'audit_logs', ['timestamp'], unique=False)
    op.create_index(op.f('ix_audit_logs_user_id'), 'audit_logs', ['user_id'], unique=False)
    op.create_index(op.f('ix_audit_logs_action'), 'audit_logs', ['action'], unique=False)
    op.create_index(op.f('ix_audit_logs_resource'), 'audit_logs', ['resource'], unique=False)
    op.create_index(op.f('ix_audit_logs_resource_id'), 'audit_logs', ['resource_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_audit_logs_resource_id'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_resource'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_action'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_user_id'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_timestamp'), table_name='audit_logs')
    op.drop_index(op.f('ix_audit_logs_id'), table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index(op.f('ix_user_budget_tracking_status'), table_name='user_budget_tracking')
    op.drop_index(op.f('ix_user_budget_tracking_budget_id'), table_name='user_budget_tracking')
    op.drop_index(op.f('ix_user_budget_tracking_surgery_request_id'), table_name='user_budget_tracking')
    op.drop_table('user_budget_tracking')
    op.drop_index(op.f('ix_user_surgery_requests_status'), table_name='user_surgery_requests')
    op.drop_index(op.f('ix_user_surgery_requests_user_profile_id'), table_name='user_surgery_requests')
    op.drop_table('user_surgery_requests')
    op.drop_index(op.f('ix_user_profiles_doctor_id'), table_name='user_profiles')
    op.drop_index(op.f('ix_user_profiles_role'), table_name='user_profiles')
    op.drop_index(op.f('ix_user_profiles_email'), table_name='user_profiles')
    op.drop_index(op.f('ix_user_profiles_user_id'), table_name='user_profiles')
    op.drop_table('user_profiles')
    op.drop_index(op.f('ix_auth_identities_email'), table_name='auth_identities')
    op.drop_table('auth_identities')
