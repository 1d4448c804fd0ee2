"""Create surgery_requests and budgets tables

Revision ID: 2a3b4c5d6e7f
Revises: 1f2e3d4c5b6a
Create Date: 2025-03-10 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql # For JSONB

# revision identifiers, used by Alembic.
revision = '2a3b4c5d6e7f'
down_revision = '1f2e3d4c5b6a'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('surgery_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('patient_id', sa.String(length=36), nullable=False),
        sa.Column('doctor_id', sa.String(length=36), nullable=False),
        sa.Column('anesthesia_id', sa.String(length=36), nullable=True),
        sa.Column('procedure_ids', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('opme_requests', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('hospital_equipment', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('exams_during_stay', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('needs_icu', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('icu_days', sa.Integer(), nullable=True),
        sa.Column('ward_days', sa.Integer(), nullable=True),
        sa.Column('room_days', sa.Integer(), nullable=True),
        sa.Column('procedure_duration', sa.String(length=100), nullable=True),
        sa.Column('doctor_fee', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('blood_reserve', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('blood_units', sa.Integer(), nullable=True),
        sa.Column('evoked_potential', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id'], name=op.f('fk_surgery_requests_patient_id_patients')),
        sa.ForeignKeyConstraint(['doctor_id'], ['doctors.id'], name=op.f('fk_surgery_requests_doctor_id_doctors')),
        sa.ForeignKeyConstraint(['anesthesia_id'], ['anesthesia_types.id'], name=op.f('fk_surgery_requests_anesthesia_id_anesthesia_types')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_surgery_requests'))
    )
    op.create_index(op.f('ix_surgery_requests_patient_id'), 'surgery_requests', ['patient_id'], unique=False)
    op.create_index(op.f('ix_surgery_requests_doctor_id'), 'surgery_requests', ['doctor_id'], unique=False)

    op.create_table('budgets',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('surgery_request_id', sa.String(length=36), nullable=False),
        sa.Column('hospital_id', sa.String(length=36), nullable=False),
        sa.Column('opme_quotes', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('icu_daily_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('ward_daily_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('room_daily_cost', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('anesthetist_fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('evoked_potential_fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('doctor_fee', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_cost', sa.Numeric(precision=14, scale=2), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=30), server_default='AWAITING_QUOTE', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['surgery_request_id'], ['surgery_requests.id'], name=op.f('fk_budgets_surgery_request_id_surgery_requests')),
        sa.ForeignKeyConstraint(['hospital_id'], ['hospitals.id'], name=op.f('fk_budgets_hospital_id_hospitals')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_budgets')),
        sa.CheckConstraint(
            "status IN ('APPROVED', 'AWAITING_QUOTE', 'AWAITING_PATIENT', 'AWAITING_PAYMENT', 'CANCELED')",
            name='ck_budgets_status_valid'
        ),
        sa.CheckConstraint('total_cost >= 0', name='ck_budgets_total_cost_non_negative')
    )
    op.create_index(op.f('ix_budgets_surgery_request_id'), 'budgets', ['surgery_request_id'], unique=False)
    op.create_index(op.f('ix_budgets_hospital_id'), 'budgets', ['hospital_id'], unique=False)
    op.create_index(op.f('ix_budgets_status'), 'budgets', ['status'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_budgets_status'), table_name='budgets')
    op.drop_index(op.f('ix_budgets_hospital_id'), table_name='budgets')
    op.drop_index(op.f('ix_budgets_surgery_request_id'), table_name='budgets')
    op.drop_table('budgets')
    op.drop_index(op.f('ix_surgery_requests_doctor_id'), table_name='surgery_requests')
    op.drop_index(op.f('ix_surgery_requests_patient_id'), table_name='surgery_requests')
    op.drop_table('surgery_requests')
