"""Create warranty tables (machine_models, machines, sales, service_requests, service_visits, action_logs)

Revision ID: 3c7e1f0a9d42
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3c7e1f0a9d42'
down_revision = None
branch_labels = None
depends_on = None

SERVICE_STATUSES = ('PENDING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'CLOSED')


def upgrade() -> None:
    # service_requests creates the servicestatus type; later tables reuse it
    if op.get_context().dialect.name == 'postgresql':
        existing_service_status = postgresql.ENUM(*SERVICE_STATUSES, name='servicestatus', create_type=False)
    else:
        existing_service_status = sa.Enum(*SERVICE_STATUSES, name='servicestatus')

    # 1. machine_models
    op.create_table(
        'machine_models',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('warranty_period_months', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_machine_models_id'), 'machine_models', ['id'], unique=False)
    op.create_index(op.f('ix_machine_models_name'), 'machine_models', ['name'], unique=False)

    # 2. machines (FK: machine_models)
    op.create_table(
        'machines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.String(length=100), nullable=False),
        sa.Column('machine_model_id', sa.Integer(), nullable=False),
        sa.Column('manufacturing_date', sa.DateTime(), nullable=True),
        sa.Column('test_result_data', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['machine_model_id'], ['machine_models.id'], ),
    )
    op.create_index(op.f('ix_machines_id'), 'machines', ['id'], unique=False)
    op.create_index(op.f('ix_machines_serial_number'), 'machines', ['serial_number'], unique=True)
    op.create_index(op.f('ix_machines_machine_model_id'), 'machines', ['machine_model_id'], unique=False)

    # 3. sales (FK: machines, one per machine)
    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('machine_id', sa.Integer(), nullable=False),
        sa.Column('sale_date', sa.DateTime(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_contact_person_name', sa.String(length=255), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_phone_number', sa.String(length=50), nullable=True),
        sa.Column('customer_address', sa.Text(), nullable=True),
        sa.Column('distributor_invoice_number', sa.String(length=100), nullable=True),
        sa.Column('whatsapp_number', sa.String(length=50), nullable=True),
        sa.Column('reminder_opt_out', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['machine_id'], ['machines.id'], ),
    )
    op.create_index(op.f('ix_sales_id'), 'sales', ['id'], unique=False)
    op.create_index(op.f('ix_sales_machine_id'), 'sales', ['machine_id'], unique=True)
    op.create_index(op.f('ix_sales_sale_date'), 'sales', ['sale_date'], unique=False)
    op.create_index(op.f('ix_sales_customer_email'), 'sales', ['customer_email'], unique=False)

    # 4. service_requests (FK: machines)
    op.create_table(
        'service_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('machine_id', sa.Integer(), nullable=False),
        sa.Column('complaint', sa.Text(), nullable=True),
        sa.Column('status', sa.Enum(*SERVICE_STATUSES, name='servicestatus'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['machine_id'], ['machines.id'], ),
    )
    op.create_index(op.f('ix_service_requests_id'), 'service_requests', ['id'], unique=False)
    op.create_index(op.f('ix_service_requests_machine_id'), 'service_requests', ['machine_id'], unique=False)
    op.create_index(op.f('ix_service_requests_status'), 'service_requests', ['status'], unique=False)
    op.create_index(op.f('ix_service_requests_created_at'), 'service_requests', ['created_at'], unique=False)

    # 5. service_visits (FK: service_requests, one per request)
    op.create_table(
        'service_visits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('service_request_id', sa.Integer(), nullable=False),
        sa.Column('service_visit_date', sa.DateTime(), nullable=False),
        sa.Column('status', existing_service_status, nullable=True),
        sa.Column('total_cost', sa.Float(), nullable=True),
        sa.Column('engineer_name', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['service_request_id'], ['service_requests.id'], ),
    )
    op.create_index(op.f('ix_service_visits_id'), 'service_visits', ['id'], unique=False)
    op.create_index(op.f('ix_service_visits_service_request_id'), 'service_visits', ['service_request_id'], unique=True)
    op.create_index(op.f('ix_service_visits_status'), 'service_visits', ['status'], unique=False)

    # 6. action_logs (FK: machines)
    op.create_table(
        'action_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('machine_id', sa.Integer(), nullable=False),
        sa.Column('action_type', sa.Enum('REMINDER_SENT', 'SERVICE_SCHEDULED', 'WARRANTY_VIEWED', 'EMAIL_OPENED', 'LINK_CLICKED', name='actiontype'), nullable=False),
        sa.Column('channel', sa.Enum('EMAIL', 'WHATSAPP', 'WEB', 'SMS', 'SYSTEM', name='actionchannel'), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['machine_id'], ['machines.id'], ),
    )
    op.create_index(op.f('ix_action_logs_id'), 'action_logs', ['id'], unique=False)
    op.create_index(op.f('ix_action_logs_machine_id'), 'action_logs', ['machine_id'], unique=False)
    op.create_index(op.f('ix_action_logs_action_type'), 'action_logs', ['action_type'], unique=False)
    op.create_index(op.f('ix_action_logs_created_at'), 'action_logs', ['created_at'], unique=False)
    # Dedup lookup: one REMINDER_SENT per machine per day
    op.create_index('ix_action_logs_machine_type_created', 'action_logs', ['machine_id', 'action_type', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('action_logs')
    op.drop_table('service_visits')
    op.drop_table('service_requests')
    op.drop_table('sales')
    op.drop_table('machines')
    op.drop_table('machine_models')
    sa.Enum(name='actionchannel').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='actiontype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='servicestatus').drop(op.get_bind(), checkfirst=True)
