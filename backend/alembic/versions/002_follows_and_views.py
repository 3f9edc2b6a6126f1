"""Follows and project views: user_profiles table, views column, wider id columns.

Revision ID: 002_follows_views
Revises: 001_initial
Create Date: 2026-10-19

Follower sets live in engagement_records under "user:<id>" subject ids, so
subject and actor id columns grow to 255 characters. Project detail fetches
count views in projects.views.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_follows_views'
down_revision: Union[str, None] = '001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_WIDENED = [
    ('projects', 'owner_id'),
    ('engagement_records', 'subject_id'),
    ('engagement_actors', 'subject_id'),
    ('engagement_actors', 'actor_id'),
    ('notifications', 'recipient_id'),
    ('notifications', 'actor_id'),
    ('notifications', 'subject_id'),
]


def upgrade() -> None:
    for table, column in _WIDENED:
        op.alter_column(
            table, column, type_=sa.String(255), existing_type=sa.String(64),
            existing_nullable=False,
        )
    op.add_column(
        'projects',
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(250), primary_key=True),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('user_profiles')
    op.drop_column('projects', 'views')
    for table, column in reversed(_WIDENED):
        op.alter_column(
            table, column, type_=sa.String(64), existing_type=sa.String(255),
            existing_nullable=False,
        )
