"""Messages, reports, orders and page sections

Revision ID: c9e2f4a61b37
Revises: 8b47e0c3d5a2
Create Date: 2026-10-19 11:20:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c9e2f4a61b37'
down_revision: Union[str, None] = '8b47e0c3d5a2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_from_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_to_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_user_from_id', 'messages', ['user_from_id'])
    op.create_index('ix_messages_user_to_id', 'messages', ['user_to_id'])

    op.create_table('messages_deleted',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message_id', sa.Integer(), sa.ForeignKey('messages.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'message_id', name='uq_messages_deleted_user_message'),
    )

    op.create_table('reports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('comment_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reported_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reporter_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('comment_id', 'reporter_user_id', name='uq_reports_comment_reporter'),
    )

    op.create_table('orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('type', sa.Text(), nullable=True),
        sa.Column('status', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table('orders_deleted',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'order_id', name='uq_orders_deleted_user_order'),
    )

    op.create_table('sections',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('page_name', sa.Text(), nullable=False),
        sa.Column('section_order', sa.Integer(), nullable=False),
        sa.Column('layout_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sections_page_name', 'sections', ['page_name'])


def downgrade() -> None:
    op.drop_index('ix_sections_page_name', 'sections')
    op.drop_table('sections')
    op.drop_table('orders_deleted')
    op.drop_index('ix_orders_created_at', 'orders')
    op.drop_table('orders')
    op.drop_table('reports')
    op.drop_table('messages_deleted')
    op.drop_index('ix_messages_user_to_id', 'messages')
    op.drop_index('ix_messages_user_from_id', 'messages')
    op.drop_table('messages')
