"""Returns reconciliation: orders ledger, product variations, returned items

Revision ID: r1a2b3c4d5e6
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'r1a2b3c4d5e6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('orders',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('items', sa.Text(), nullable=True),
    sa.Column('amount_cents', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
    sqlite_autoincrement=True
    )

    op.create_table('product_variations',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('barcode', sa.String(length=64), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=True),
    sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.CheckConstraint('quantity >= 0', name=op.f('ck_product_variations_quantity_nonneg')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_product_variations')),
    sqlite_autoincrement=True
    )
    with op.batch_alter_table('product_variations', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_product_variations_barcode'), ['barcode'], unique=True)

    op.create_table('returned_items',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('order_id', sa.Integer(), nullable=False),
    sa.Column('product_variation_id', sa.Integer(), nullable=False),
    sa.Column('quantity', sa.Integer(), nullable=False),
    sa.Column('reason', sa.Text(), nullable=False),
    sa.Column('returned_amount_cents', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('return_date', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name=op.f('fk_returned_items_order_id_orders'), ondelete='RESTRICT'),
    sa.ForeignKeyConstraint(['product_variation_id'], ['product_variations.id'], name=op.f('fk_returned_items_product_variation_id_product_variations'), ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_returned_items')),
    sqlite_autoincrement=True
    )
    with op.batch_alter_table('returned_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_returned_items_order_id'), ['order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_returned_items_product_variation_id'), ['product_variation_id'], unique=False)
        batch_op.create_index('ix_returned_items_order_date', ['order_id', 'return_date'], unique=False)


def downgrade():
    with op.batch_alter_table('returned_items', schema=None) as batch_op:
        batch_op.drop_index('ix_returned_items_order_date')
        batch_op.drop_index(batch_op.f('ix_returned_items_product_variation_id'))
        batch_op.drop_index(batch_op.f('ix_returned_items_order_id'))

    op.drop_table('returned_items')

    with op.batch_alter_table('product_variations', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_product_variations_barcode'))

    op.drop_table('product_variations')
    op.drop_table('orders')
