"""create_printer_cases

Revision ID: 20261019_0900_printer_cases
Revises:
Create Date: 2026-10-19 09:00:00.000000

Tabla de casos de servicio técnico:
- Número de caso consecutivo y único
- Estado restringido a pending / in_progress / resolved
- Índices para el listado (estado, fecha de ingreso, cliente)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_0900_printer_cases'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'printer_cases',

        # =========================================================
        # IDENTIFICACIÓN
        # =========================================================
        sa.Column('id', sa.String(length=36), nullable=False, comment='ID único del caso (UUID)'),
        sa.Column('case_number', sa.Integer(), nullable=False, comment='Número consecutivo visible'),

        # =========================================================
        # IMPRESORA Y CLIENTE
        # =========================================================
        sa.Column('reference', sa.String(length=255), nullable=False, comment='Referencia / modelo de la impresora'),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('client_tax_id', sa.String(length=64), nullable=False, comment='NIT o cédula'),
        sa.Column('phone', sa.String(length=64), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False, server_default='', comment='Observaciones e historial de proceso'),

        # =========================================================
        # CICLO DE VIDA
        # =========================================================
        sa.Column('intake_at', sa.DateTime(), nullable=False, comment='Fecha de ingreso (UTC)'),
        sa.Column('delivered_at', sa.DateTime(), nullable=True, comment='Fecha de entrega (UTC)'),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('resolution_note', sa.Text(), nullable=False, server_default='', comment='Motivo de resolución'),
        sa.Column('process_note', sa.Text(), nullable=False, server_default='', comment='Última descripción de proceso'),

        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'resolved')",
            name='ck_printer_cases_status',
        ),
    )

    op.create_index('ix_printer_cases_case_number', 'printer_cases', ['case_number'], unique=True)
    op.create_index('ix_printer_cases_client_name', 'printer_cases', ['client_name'])
    op.create_index('ix_printer_cases_intake_at', 'printer_cases', ['intake_at'])
    op.create_index('ix_printer_cases_status', 'printer_cases', ['status'])


def downgrade() -> None:
    op.drop_index('ix_printer_cases_status', table_name='printer_cases')
    op.drop_index('ix_printer_cases_intake_at', table_name='printer_cases')
    op.drop_index('ix_printer_cases_client_name', table_name='printer_cases')
    op.drop_index('ix_printer_cases_case_number', table_name='printer_cases')
    op.drop_table('printer_cases')
