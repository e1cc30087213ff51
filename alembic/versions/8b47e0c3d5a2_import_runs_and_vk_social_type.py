"""Import run audit table, vk social type

Revision ID: 8b47e0c3d5a2
Revises: 3f1a9c2d7e10
Create Date: 2026-10-02 16:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b47e0c3d5a2'
down_revision: Union[str, None] = '3f1a9c2d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('import_runs',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('filename', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('records_found', sa.Integer(), nullable=True),
        sa.Column('imported', sa.Integer(), nullable=True),
        sa.Column('failed', sa.Integer(), nullable=True),
        sa.Column('errors', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_import_runs_created_at', 'import_runs', ['created_at'])

    # Later dumps carry <vk>
    op.execute(sa.text("INSERT INTO socials_type (identificator, name) VALUES ('vk', 'VK')"))


def downgrade() -> None:
    op.execute(sa.text("DELETE FROM socials_type WHERE identificator = 'vk'"))
    op.drop_index('ix_import_runs_created_at', 'import_runs')
    op.drop_table('import_runs')
