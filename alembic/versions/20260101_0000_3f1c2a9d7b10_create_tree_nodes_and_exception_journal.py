"""create tree_nodes and exception_journal

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-01-01 00:00:00.000000+00:00

"""
from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

BIGINT_ID = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        'tree_nodes',
        sa.Column(
            'tree_id',
            sa.Integer(),
            nullable=False,
            comment='Tree grouping key; immutable once set',
        ),
        sa.Column(
            'name',
            sa.String(length=255),
            nullable=False,
            comment='Display name of the node',
        ),
        sa.Column(
            'parent_id',
            BIGINT_ID,
            nullable=True,
            comment='Parent node in the same tree; NULL for the root',
        ),
        sa.Column(
            'path',
            sa.String(length=4000),
            nullable=False,
            comment="Materialized path of ancestor ids, e.g. '1.3.7.'",
        ),
        sa.Column(
            'id',
            BIGINT_ID,
            autoincrement=True,
            nullable=False,
            comment='Auto-incrementing integer primary key',
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
            comment='Record creation timestamp (UTC)',
        ),
        sa.ForeignKeyConstraint(
            ['parent_id'],
            ['tree_nodes.id'],
            name=op.f('fk_tree_nodes_parent_id_tree_nodes'),
            ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tree_nodes')),
    )
    op.create_index(op.f('ix_tree_nodes_tree_id'), 'tree_nodes', ['tree_id'], unique=False)
    op.create_index(op.f('ix_tree_nodes_parent_id'), 'tree_nodes', ['parent_id'], unique=False)
    op.create_index('ix_tree_nodes_tree_id_id', 'tree_nodes', ['tree_id', 'id'], unique=False)
    op.create_index(
        'ix_tree_nodes_tree_id_path',
        'tree_nodes',
        ['tree_id', 'path'],
        unique=False,
        postgresql_ops={'path': 'text_pattern_ops'},
    )
    op.create_index(
        'uq_tree_nodes_tree_id_root',
        'tree_nodes',
        ['tree_id'],
        unique=True,
        postgresql_where=sa.text('parent_id IS NULL'),
        sqlite_where=sa.text('parent_id IS NULL'),
    )

    op.create_table(
        'exception_journal',
        sa.Column(
            'timestamp',
            sa.DateTime(timezone=True),
            nullable=False,
            comment='When the exception was recorded',
        ),
        sa.Column(
            'query_parameters',
            sa.Text(),
            nullable=True,
            comment='Query parameters as JSON (name -> list of values)',
        ),
        sa.Column('body_parameters', sa.Text(), nullable=True),
        sa.Column('stack_trace', sa.Text(), nullable=False),
        sa.Column('exception_type', sa.String(length=500), nullable=False),
        sa.Column('exception_message', sa.Text(), nullable=False),
        sa.Column('http_method', sa.String(length=10), nullable=True),
        sa.Column('request_path', sa.String(length=2000), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('client_ip_address', sa.String(length=45), nullable=True),
        sa.Column(
            'id',
            BIGINT_ID,
            autoincrement=True,
            nullable=False,
            comment='Auto-incrementing integer primary key',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_exception_journal')),
    )
    op.create_index(
        op.f('ix_exception_journal_timestamp'), 'exception_journal', ['timestamp'], unique=False
    )
    op.create_index(
        op.f('ix_exception_journal_exception_type'),
        'exception_journal',
        ['exception_type'],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_exception_journal_exception_type'), table_name='exception_journal')
    op.drop_index(op.f('ix_exception_journal_timestamp'), table_name='exception_journal')
    op.drop_table('exception_journal')

    op.drop_index('uq_tree_nodes_tree_id_root', table_name='tree_nodes')
    op.drop_index('ix_tree_nodes_tree_id_path', table_name='tree_nodes')
    op.drop_index('ix_tree_nodes_tree_id_id', table_name='tree_nodes')
    op.drop_index(op.f('ix_tree_nodes_parent_id'), table_name='tree_nodes')
    op.drop_index(op.f('ix_tree_nodes_tree_id'), table_name='tree_nodes')
    op.drop_table('tree_nodes')
