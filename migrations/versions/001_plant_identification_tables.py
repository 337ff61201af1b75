"""Create plant identification tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create species catalog and scan history tables"""

    # 1. Species catalog
    op.create_table('plant_species',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('scientific_name', sa.String(255), nullable=False),
        sa.Column('common_name', sa.String(255), nullable=True),
        sa.Column('care_profile', postgresql.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_urls', postgresql.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('scientific_name', name='uq_plant_species_scientific_name'),
    )

    op.create_index('ix_plant_species_scientific_name', 'plant_species', ['scientific_name'])

    # 2. Scan history (append-only)
    op.create_table('scan_records',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('image_fingerprint', sa.String(64), nullable=True),
        sa.Column('result_species_id', sa.String(36), nullable=True),
        sa.Column('result_species_name', sa.String(255), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=False, server_default='0'),
        sa.Column('threshold_met', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('suggested_species', postgresql.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('confidence >= 0 AND confidence <= 1', name='ck_scan_records_confidence'),
    )

    op.create_index('ix_scan_records_user_id', 'scan_records', ['user_id'])
    op.create_index('ix_scan_records_image_fingerprint', 'scan_records', ['image_fingerprint'])
    op.create_index('ix_scan_records_created_at', 'scan_records', ['created_at'])


def downgrade() -> None:
    """Drop plant identification tables"""
    op.drop_index('ix_scan_records_created_at', table_name='scan_records')
    op.drop_index('ix_scan_records_image_fingerprint', table_name='scan_records')
    op.drop_index('ix_scan_records_user_id', table_name='scan_records')
    op.drop_table('scan_records')

    op.drop_index('ix_plant_species_scientific_name', table_name='plant_species')
    op.drop_table('plant_species')
