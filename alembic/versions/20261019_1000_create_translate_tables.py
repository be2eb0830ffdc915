"""create translate_attributes and translate_indexes tables

Revision ID: 20261019_1000_create_translate_tables
Revises:
Create Date: 2026-10-19 10:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = '20261019_1000_create_translate_tables'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        'translate_attributes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('locale', sa.String(16), nullable=False),
        sa.Column('model_id', sa.String(255), nullable=False),
        sa.Column('model_type', sa.String(255), nullable=False),
        sa.Column('attribute_data', sa.Text(), nullable=True),
        sa.UniqueConstraint('locale', 'model_id', 'model_type', name='uq_translate_attributes_record_locale'),
    )
    op.create_index('ix_translate_attributes_locale', 'translate_attributes', ['locale'])
    op.create_index('ix_translate_attributes_record', 'translate_attributes', ['model_id', 'model_type'])

    op.create_table(
        'translate_indexes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('locale', sa.String(16), nullable=False),
        sa.Column('model_id', sa.String(255), nullable=False),
        sa.Column('model_type', sa.String(255), nullable=False),
        sa.Column('item', sa.String(255), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.UniqueConstraint('locale', 'model_id', 'model_type', 'item', name='uq_translate_indexes_record_item'),
    )
    op.create_index('ix_translate_indexes_lookup', 'translate_indexes', ['model_type', 'locale', 'item'])
    op.create_index('ix_translate_indexes_record', 'translate_indexes', ['model_id', 'model_type'])

def downgrade() -> None:
    op.drop_index('ix_translate_indexes_record', table_name='translate_indexes')
    op.drop_index('ix_translate_indexes_lookup', table_name='translate_indexes')
    op.drop_table('translate_indexes')
    op.drop_index('ix_translate_attributes_record', table_name='translate_attributes')
    op.drop_index('ix_translate_attributes_locale', table_name='translate_attributes')
    op.drop_table('translate_attributes')
