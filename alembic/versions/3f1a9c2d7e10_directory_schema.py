"""Directory schema: accounts, cities, tags, socials, users, comments, favorites, rating

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-09-14 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SOCIAL_TYPES = [
    ('fb', 'Facebook'),
    ('od', 'Odnoklassniki'),
    ('icq', 'ICQ'),
    ('insta', 'Instagram'),
    ('tw', 'Twitter'),
    ('email', 'Email'),
    ('tg', 'Telegram'),
    ('tik', 'TikTok'),
    ('of', 'OnlyFans'),
    ('tel', 'Telephone'),
    ('skype', 'Skype'),
]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('city',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name_ru', sa.Text(), nullable=False),
        sa.Column('name_eu', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_ru', name='uq_city_name_ru'),
    )

    op.create_table('tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name_ru', sa.Text(), nullable=False),
        sa.Column('name_eu', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_ru', name='uq_tags_name_ru'),
    )

    op.create_table('accounts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('identificator', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('city_id', sa.Integer(), sa.ForeignKey('city.id'), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('date_of_create', sa.Date(), nullable=True),
        sa.Column('check_video', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('photo', sa.LargeBinary(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('identificator'),
    )
    op.create_index('ix_accounts_city_id', 'accounts', ['city_id'])
    op.create_index('ix_accounts_date_of_create', 'accounts', ['date_of_create'])

    op.create_table('tags_detail',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tag_id', 'account_id', name='uq_tags_detail_tag_account'),
    )
    op.create_index('ix_tags_detail_account_id', 'tags_detail', ['account_id'])

    socials_type = op.create_table('socials_type',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('identificator', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('identificator'),
    )

    op.create_table('socials',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type_social_id', sa.Integer(), sa.ForeignKey('socials_type.id'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('type_social_id', 'text', name='uq_socials_type_text'),
    )

    op.create_table('socials_detail',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('socials_id', sa.Integer(), sa.ForeignKey('socials.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_id', 'socials_id', name='uq_socials_detail_account_social'),
    )

    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('login', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), nullable=False, server_default='user'),
        sa.Column('avatar', sa.LargeBinary(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('login'),
    )

    op.create_table('comments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_account_id', 'comments', ['account_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])

    op.create_table('favorites',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('accounts_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('users_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('accounts_id', 'users_id', name='uq_favorites_account_user'),
    )

    op.create_table('rating',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('users_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rate', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_id', 'users_id', name='uq_rating_account_user'),
    )

    op.bulk_insert(socials_type, [
        {'identificator': ident, 'name': name} for ident, name in SOCIAL_TYPES
    ])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('rating')
    op.drop_table('favorites')
    op.drop_index('ix_comments_user_id', 'comments')
    op.drop_index('ix_comments_account_id', 'comments')
    op.drop_table('comments')
    op.drop_table('users')
    op.drop_table('socials_detail')
    op.drop_table('socials')
    op.drop_table('socials_type')
    op.drop_index('ix_tags_detail_account_id', 'tags_detail')
    op.drop_table('tags_detail')
    op.drop_index('ix_accounts_date_of_create', 'accounts')
    op.drop_index('ix_accounts_city_id', 'accounts')
    op.drop_table('accounts')
    op.drop_table('tags')
    op.drop_table('city')
