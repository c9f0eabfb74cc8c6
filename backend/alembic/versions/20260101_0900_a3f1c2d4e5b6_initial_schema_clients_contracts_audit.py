"""Initial schema: users, clients, contracts, scopes, assets, SAFs, COCs, documents, audit trail

Revision ID: a3f1c2d4e5b6
Revises:
Create Date: 2026-01-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a3f1c2d4e5b6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    ]


def _log_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
    ]


def _client_info() -> list[sa.Column]:
    return [
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('session_id', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables for the client manager."""
    # 1. Users (no dependencies)
    op.create_table(
        'users',
        *_timestamps(),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        sa.Column('auth_provider', sa.String(), nullable=False, server_default='local'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )

    # 2. Clients (no dependencies)
    op.create_table(
        'clients',
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('short_name', sa.String(), nullable=True),
        sa.Column('domain', sa.String(), nullable=True),
        sa.Column('industry', sa.String(), nullable=True),
        sa.Column('company_size', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('source', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('website', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.String(), nullable=True),
        sa.Column('contact_phone', sa.String(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_clients_name'), 'clients', ['name'])
    op.create_index(op.f('ix_clients_status'), 'clients', ['status'])

    # 3. Service catalog and license pools (no dependencies)
    op.create_table(
        'services',
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('delivery_model', sa.String(), nullable=False, server_default='serverless'),
        sa.Column('base_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('pricing_unit', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'license_pools',
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('vendor', sa.String(), nullable=False),
        sa.Column('product_name', sa.String(), nullable=False),
        sa.Column('license_type', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('total_licenses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('available_licenses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cost_per_license', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('ordered_date', sa.DateTime(), nullable=True),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    # 4. Hardware assets (no dependencies)
    op.create_table(
        'hardware_assets',
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('manufacturer', sa.String(), nullable=True),
        sa.Column('model', sa.String(), nullable=True),
        sa.Column('serial_number', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='available'),
        sa.Column('purchase_date', sa.DateTime(), nullable=True),
        sa.Column('purchase_cost', sa.Numeric(12, 2), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_hardware_assets_serial_number'), 'hardware_assets', ['serial_number'])

    # 5. Contracts (depends on clients)
    op.create_table(
        'contracts',
        *_timestamps(),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('auto_renewal', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('renewal_terms', sa.Text(), nullable=True),
        sa.Column('total_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('document_url', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_contracts_client_id'), 'contracts', ['client_id'])

    # 6. Proposals (depends on contracts)
    op.create_table(
        'proposals',
        *_timestamps(),
        sa.Column('contract_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('version', sa.String(), nullable=False, server_default='1.0'),
        sa.Column('proposed_value', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('document_url', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_proposals_contract_id'), 'proposals', ['contract_id'])

    # 7. SAFs and COCs (depend on clients, contracts, users)
    op.create_table(
        'service_authorization_forms',
        *_timestamps(),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('contract_id', sa.Integer(), nullable=True),
        sa.Column('saf_number', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('approved_date', sa.DateTime(), nullable=True),
        sa.Column('value', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('saf_number'),
    )
    op.create_index(op.f('ix_service_authorization_forms_client_id'), 'service_authorization_forms', ['client_id'])
    op.create_index(op.f('ix_service_authorization_forms_contract_id'), 'service_authorization_forms', ['contract_id'])

    op.create_table(
        'certificates_of_compliance',
        *_timestamps(),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('contract_id', sa.Integer(), nullable=True),
        sa.Column('saf_id', sa.Integer(), nullable=True),
        sa.Column('certificate_number', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('compliance_type', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('issue_date', sa.DateTime(), nullable=True),
        sa.Column('expiry_date', sa.DateTime(), nullable=True),
        sa.Column('issued_by', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.ForeignKeyConstraint(['saf_id'], ['service_authorization_forms.id']),
        sa.ForeignKeyConstraint(['issued_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('certificate_number'),
    )
    op.create_index(op.f('ix_certificates_of_compliance_client_id'), 'certificates_of_compliance', ['client_id'])
    op.create_index(op.f('ix_certificates_of_compliance_saf_id'), 'certificates_of_compliance', ['saf_id'])

    # 8. Service scopes (depends on contracts, services, SAFs)
    op.create_table(
        'service_scopes',
        *_timestamps(),
        sa.Column('contract_id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('saf_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('scope_definition', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('monthly_value', sa.Numeric(12, 2), nullable=True),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.ForeignKeyConstraint(['service_id'], ['services.id']),
        sa.ForeignKeyConstraint(['saf_id'], ['service_authorization_forms.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_service_scopes_contract_id'), 'service_scopes', ['contract_id'])
    op.create_index(op.f('ix_service_scopes_saf_id'), 'service_scopes', ['saf_id'])

    # 9. Financial transactions and hardware assignments (depend on scopes)
    op.create_table(
        'financial_transactions',
        *_timestamps(),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('reference', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('transaction_date', sa.DateTime(), nullable=True),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('contract_id', sa.Integer(), nullable=True),
        sa.Column('service_scope_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.ForeignKeyConstraint(['service_scope_id'], ['service_scopes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_financial_transactions_client_id'), 'financial_transactions', ['client_id'])
    op.create_index(op.f('ix_financial_transactions_contract_id'), 'financial_transactions', ['contract_id'])

    op.create_table(
        'client_hardware_assignments',
        *_timestamps(),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('hardware_asset_id', sa.Integer(), nullable=False),
        sa.Column('service_scope_id', sa.Integer(), nullable=True),
        sa.Column('assigned_date', sa.DateTime(), nullable=True),
        sa.Column('returned_date', sa.DateTime(), nullable=True),
        sa.Column('installation_location', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['hardware_asset_id'], ['hardware_assets.id']),
        sa.ForeignKeyConstraint(['service_scope_id'], ['service_scopes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_client_hardware_assignments_client_id'), 'client_hardware_assignments', ['client_id'])
    op.create_index(
        op.f('ix_client_hardware_assignments_hardware_asset_id'), 'client_hardware_assignments', ['hardware_asset_id']
    )

    # 10. Documents (depends on clients, contracts, users)
    op.create_table(
        'documents',
        *_timestamps(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('document_type', sa.String(), nullable=False),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_path', sa.String(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('contract_id', sa.Integer(), nullable=True),
        sa.Column('uploaded_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['contract_id'], ['contracts.id']),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_documents_client_id'), 'documents', ['client_id'])
    op.create_index(op.f('ix_documents_contract_id'), 'documents', ['contract_id'])

    # 11. Audit trail (no foreign keys so rows outlive the users they describe)
    op.create_table(
        'audit_logs',
        *_log_columns(),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('entity_name', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('severity', sa.String(), nullable=False, server_default='info'),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        *_client_info(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_timestamp'), 'audit_logs', ['timestamp'])
    op.create_index(op.f('ix_audit_logs_user_id'), 'audit_logs', ['user_id'])
    op.create_index(op.f('ix_audit_logs_category'), 'audit_logs', ['category'])
    op.create_index('ix_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id'])

    op.create_table(
        'change_history',
        *_log_columns(),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('entity_name', sa.String(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('field_name', sa.String(), nullable=True),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('batch_id', sa.String(), nullable=True),
        sa.Column('rollback_data', postgresql.JSONB(), nullable=True),
        sa.Column('automatic_change', sa.Boolean(), nullable=False, server_default='false'),
        *_client_info(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_change_history_timestamp'), 'change_history', ['timestamp'])
    op.create_index(op.f('ix_change_history_user_id'), 'change_history', ['user_id'])
    op.create_index(op.f('ix_change_history_batch_id'), 'change_history', ['batch_id'])
    op.create_index('ix_change_history_entity', 'change_history', ['entity_type', 'entity_id'])

    op.create_table(
        'security_events',
        *_log_columns(),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('failure_reason', sa.String(), nullable=True),
        sa.Column('risk_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('blocked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        *_client_info(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_security_events_timestamp'), 'security_events', ['timestamp'])
    op.create_index(op.f('ix_security_events_user_id'), 'security_events', ['user_id'])
    op.create_index(op.f('ix_security_events_event_type'), 'security_events', ['event_type'])

    op.create_table(
        'data_access_logs',
        *_log_columns(),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('entity_name', sa.String(), nullable=True),
        sa.Column('access_type', sa.String(), nullable=False),
        sa.Column('access_method', sa.String(), nullable=False),
        sa.Column('data_scope', sa.String(), nullable=True),
        sa.Column('result_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('sensitive_data', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('filters', postgresql.JSONB(), nullable=True),
        sa.Column('purpose', sa.String(), nullable=True),
        *_client_info(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_data_access_logs_timestamp'), 'data_access_logs', ['timestamp'])
    op.create_index(op.f('ix_data_access_logs_user_id'), 'data_access_logs', ['user_id'])
    op.create_index(op.f('ix_data_access_logs_entity_type'), 'data_access_logs', ['entity_type'])

    op.create_table(
        'system_events',
        *_log_columns(),
        sa.Column('event_type', sa.String(), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('severity', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('details', postgresql.JSONB(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_system_events_timestamp'), 'system_events', ['timestamp'])
    op.create_index(op.f('ix_system_events_event_type'), 'system_events', ['event_type'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        'system_events',
        'data_access_logs',
        'security_events',
        'change_history',
        'audit_logs',
        'documents',
        'client_hardware_assignments',
        'financial_transactions',
        'service_scopes',
        'certificates_of_compliance',
        'service_authorization_forms',
        'proposals',
        'contracts',
        'hardware_assets',
        'license_pools',
        'services',
        'clients',
        'users',
    ):
        op.drop_table(table)
