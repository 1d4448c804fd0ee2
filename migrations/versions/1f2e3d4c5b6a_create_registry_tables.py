"""Create registry tables

Revision ID: 1f2e3d4c5b6a
Revises:
Create Date: 2025-03-10 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql # For JSONB

# revision identifiers, used by Alembic.
revision = '1f2e3d4c5b6a'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False), # onupdate handled by model
    ]


def upgrade():
    op.create_table('patients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('cpf', sa.String(length=14), nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('comorbidities', postgresql.JSONB(astext_fallback=True), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('parent_name', sa.String(length=255), nullable=True),
        sa.Column('parent_cpf', sa.String(length=14), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_patients'))
    )
    op.create_index(op.f('ix_patients_name'), 'patients', ['name'], unique=False)
    op.create_index(op.f('ix_patients_cpf'), 'patients', ['cpf'], unique=False)

    op.create_table('doctors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('cpf', sa.String(length=14), nullable=False),
        sa.Column('crm', sa.String(length=50), nullable=False),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('pix_key', sa.String(length=255), nullable=True),
        sa.Column('specialty', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_doctors'))
    )
    op.create_index(op.f('ix_doctors_name'), 'doctors', ['name'], unique=False)
    op.create_index(op.f('ix_doctors_crm'), 'doctors', ['crm'], unique=False)
    op.create_index(op.f('ix_doctors_user_id'), 'doctors', ['user_id'], unique=False)

    op.create_table('hospitals',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_hospitals'))
    )
    op.create_index(op.f('ix_hospitals_name'), 'hospitals', ['name'], unique=False)

    op.create_table('suppliers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('cnpj', sa.String(length=18), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_suppliers'))
    )
    op.create_index(op.f('ix_suppliers_name'), 'suppliers', ['name'], unique=False)
    op.create_index(op.f('ix_suppliers_cnpj'), 'suppliers', ['cnpj'], unique=False)

    op.create_table('opmes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=255), nullable=True),
        sa.Column('supplier_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], name=op.f('fk_opmes_supplier_id_suppliers'), ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_opmes'))
    )
    op.create_index(op.f('ix_opmes_name'), 'opmes', ['name'], unique=False)
    op.create_index(op.f('ix_opmes_supplier_id'), 'opmes', ['supplier_id'], unique=False)

    op.create_table('procedures',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_procedures'))
    )
    op.create_index(op.f('ix_procedures_name'), 'procedures', ['name'], unique=False)

    op.create_table('anesthesia_types',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_anesthesia_types'))
    )
    op.create_index(op.f('ix_anesthesia_types_type'), 'anesthesia_types', ['type'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_anesthesia_types_type'), table_name='anesthesia_types')
    op.drop_table('anesthesia_types')
    op.drop_index(op.f('ix_procedures_name'), table_name='procedures')
    op.drop_table('procedures')
    op.drop_index(op.f('ix_opmes_supplier_id'), table_name='opmes')
    op.drop_index(op.f('ix_opmes_name'), table_name='opmes')
    op.drop_table('opmes')
    op.drop_index(op.f('ix_suppliers_cnpj'), table_name='suppliers')
    op.drop_index(op.f('ix_suppliers_name'), table_name='suppliers')
    op.drop_table('suppliers')
    op.drop_index(op.f('ix_hospitals_name'), table_name='hospitals')
    op.drop_table('hospitals')
    op.drop_index(op.f('ix_doctors_user_id'), table_name='doctors')
    op.drop_index(op.f('ix_doctors_crm'), table_name='doctors')
    op.drop_index(op.f('ix_doctors_name'), table_name='doctors')
    op.drop_table('doctors')
    op.drop_index(op.f('ix_patients_cpf'), table_name='patients')
    op.drop_index(op.f('ix_patients_name'), table_name='patients')
    op.drop_table('patients')
