"""rate_ledger

Revision ID: 0001_rate_ledger
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_rate_ledger'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create rate_records table
    op.create_table(
        'rate_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('metal_type', sa.String(length=20), nullable=False),
        sa.Column('purity', sa.String(length=50), nullable=False),
        sa.Column('rate_per_gram', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_rate_records_id'), 'rate_records', ['id'], unique=False)
    op.create_index('ix_rate_records_pair_created', 'rate_records', ['metal_type', 'purity', 'created_at'], unique=False)
    # At most one active quotation per (metal_type, purity)
    op.create_index(
        'uq_rate_records_active_pair',
        'rate_records',
        ['metal_type', 'purity'],
        unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active = 1'),
    )

    # Create rate_change_logs table
    op.create_table(
        'rate_change_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('metal_type', sa.String(length=20), nullable=False),
        sa.Column('purity', sa.String(length=50), nullable=False),
        sa.Column('old_rate_per_gram', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('new_rate_per_gram', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('changed_by', sa.String(length=255), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_rate_change_logs_id'), 'rate_change_logs', ['id'], unique=False)
    op.create_index(op.f('ix_rate_change_logs_metal_type'), 'rate_change_logs', ['metal_type'], unique=False)
    op.create_index(op.f('ix_rate_change_logs_purity'), 'rate_change_logs', ['purity'], unique=False)

    # Create labour_charges table
    op.create_table(
        'labour_charges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('charge_type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_labour_charges_id'), 'labour_charges', ['id'], unique=False)
    op.create_index(op.f('ix_labour_charges_is_active'), 'labour_charges', ['is_active'], unique=False)

    # Create invoice_counters table
    op.create_table(
        'invoice_counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('prefix', sa.String(length=20), nullable=False),
        sa.Column('next_seq', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('prefix', name='uq_invoice_counters_prefix')
    )
    op.create_index(op.f('ix_invoice_counters_id'), 'invoice_counters', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_counters_prefix'), 'invoice_counters', ['prefix'], unique=False)

    # Create invoices table
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('gst_percent', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('cgst_percent', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('cgst_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('sgst_percent', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('sgst_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('gst_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('grand_total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_mode', sa.String(length=30), nullable=False),
        sa.Column('amount_paid', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('balance_due', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('rates_source', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number', name='uq_invoices_invoice_number')
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'], unique=False)
    op.create_index(op.f('ix_invoices_invoice_number'), 'invoices', ['invoice_number'], unique=False)

    # Create invoice_line_items table
    op.create_table(
        'invoice_line_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('item_type', sa.String(length=20), nullable=False),
        sa.Column('purity', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('weight_value', sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column('weight_unit', sa.String(length=10), nullable=False),
        sa.Column('weight_in_grams', sa.Numeric(precision=14, scale=4), nullable=False),
        sa.Column('rate_per_gram', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('labour_charge_id', sa.Integer(), nullable=True),
        sa.Column('labour_charge_type', sa.String(length=20), nullable=True),
        sa.Column('labour_charge_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('metal_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('item_total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['labour_charge_id'], ['labour_charges.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_invoice_line_items_id'), 'invoice_line_items', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_line_items_invoice_id'), 'invoice_line_items', ['invoice_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_invoice_line_items_invoice_id'), table_name='invoice_line_items')
    op.drop_index(op.f('ix_invoice_line_items_id'), table_name='invoice_line_items')
    op.drop_table('invoice_line_items')

    op.drop_index(op.f('ix_invoices_invoice_number'), table_name='invoices')
    op.drop_index(op.f('ix_invoices_id'), table_name='invoices')
    op.drop_table('invoices')

    op.drop_index(op.f('ix_invoice_counters_prefix'), table_name='invoice_counters')
    op.drop_index(op.f('ix_invoice_counters_id'), table_name='invoice_counters')
    op.drop_table('invoice_counters')

    op.drop_index(op.f('ix_labour_charges_is_active'), table_name='labour_charges')
    op.drop_index(op.f('ix_labour_charges_id'), table_name='labour_charges')
    op.drop_table('labour_charges')

    op.drop_index(op.f('ix_rate_change_logs_purity'), table_name='rate_change_logs')
    op.drop_index(op.f('ix_rate_change_logs_metal_type'), table_name='rate_change_logs')
    op.drop_index(op.f('ix_rate_change_logs_id'), table_name='rate_change_logs')
    op.drop_table('rate_change_logs')

    op.drop_index('uq_rate_records_active_pair', table_name='rate_records')
    op.drop_index('ix_rate_records_pair_created', table_name='rate_records')
    op.drop_index(op.f('ix_rate_records_id'), table_name='rate_records')
    op.drop_table('rate_records')
