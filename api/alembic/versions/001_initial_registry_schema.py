"""initial_registry_schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('servers'):
        op.create_table('servers',
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('version', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='active'),
            sa.Column('is_latest', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('repository', sa.JSON(), nullable=True),
            sa.Column('website_url', sa.Text(), nullable=True),
            sa.Column('packages', sa.JSON(), nullable=True),
            sa.Column('remotes', sa.JSON(), nullable=True),
            sa.Column('publisher_meta', sa.JSON(), nullable=False),
            sa.Column('parent_registry_meta', sa.JSON(), nullable=False),
            sa.Column('version_registry_meta', sa.JSON(), nullable=False),
            sa.Column('visibility', sa.String(length=16), nullable=False, server_default='draft'),
            sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('source', sa.String(length=64), nullable=False, server_default='official-registry'),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint('name', 'version')
        )
        op.create_index('servers_status_idx', 'servers', ['status'], unique=False)
        op.create_index('servers_source_idx', 'servers', ['source'], unique=False)
        op.create_index('servers_latest_idx', 'servers', ['name', 'is_latest'], unique=False)
        op.create_index('servers_name_idx', 'servers', ['name'], unique=False)
        op.create_index('servers_published_idx', 'servers', ['name', 'published_at'], unique=False)
        op.create_index('servers_visibility_idx', 'servers', ['visibility'], unique=False)

    if not inspector.has_table('package_metadata'):
        op.create_table('package_metadata',
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('registry_meta', sa.JSON(), nullable=False),
            sa.Column('visibility', sa.String(length=16), nullable=False, server_default='draft'),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint('name')
        )
        op.create_index('pkg_meta_name_idx', 'package_metadata', ['name'], unique=False)
        op.create_index('pkg_meta_visibility_idx', 'package_metadata', ['visibility'], unique=False)

    if not inspector.has_table('sync_log'):
        op.create_table('sync_log',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('source', sa.String(length=64), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('servers_processed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('error_message', sa.Text(), nullable=True),
            sa.Column('synced_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_sync_log_source'), 'sync_log', ['source'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('sync_log'):
        op.drop_index(op.f('ix_sync_log_source'), table_name='sync_log')
        op.drop_table('sync_log')

    if inspector.has_table('package_metadata'):
        op.drop_index('pkg_meta_visibility_idx', table_name='package_metadata')
        op.drop_index('pkg_meta_name_idx', table_name='package_metadata')
        op.drop_table('package_metadata')

    if inspector.has_table('servers'):
        for index in (
            'servers_visibility_idx',
            'servers_published_idx',
            'servers_name_idx',
            'servers_latest_idx',
            'servers_source_idx',
            'servers_status_idx',
        ):
            op.drop_index(index, table_name='servers')
        op.drop_table('servers')
