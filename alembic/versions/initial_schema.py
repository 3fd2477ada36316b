"""initial schema: users, issues, upvotes, timeline, comments, payments

Revision ID: initial_schema
Revises:
Create Date: 2025-11-02 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('role', sa.Enum('citizen', 'staff', 'admin', name='userrole'), nullable=False),
        sa.Column('premium', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_blocked', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('has_password', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    op.create_table(
        'issues',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reporter_email', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=4000), nullable=True),
        sa.Column('location', sa.String(length=300), nullable=True),
        sa.Column('category', sa.String(length=120), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('status', sa.Enum('pending', 'in_progress', 'resolved', 'closed', name='issuestatus'), nullable=False),
        sa.Column('priority', sa.Enum('normal', 'high', name='issuepriority'), nullable=False),
        sa.Column('assigned_staff', sa.String(length=255), nullable=True),
        sa.Column('upvotes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_hidden', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_boosted', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('reported_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    for col in ('reporter_email', 'title', 'category', 'status', 'priority', 'assigned_staff', 'reported_at'):
        op.create_index(op.f(f'ix_issues_{col}'), 'issues', [col], unique=False)

    op.create_table(
        'issue_upvotes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['issue_id'], ['issues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('issue_id', 'user_email', name='uq_issue_upvoter'),
    )
    op.create_index(op.f('ix_issue_upvotes_issue_id'), 'issue_upvotes', ['issue_id'], unique=False)

    op.create_table(
        'timeline',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=False),
        sa.Column('time', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    for col in ('issue_id', 'status', 'updated_by', 'time'):
        op.create_index(op.f(f'ix_timeline_{col}'), 'timeline', [col], unique=False)

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=2000), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('time', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['issue_id'], ['issues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_comments_issue_id'), 'comments', ['issue_id'], unique=False)
    op.create_index(op.f('ix_comments_user_email'), 'comments', ['user_email'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.Integer(), nullable=True),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('purpose', sa.Enum('issue_boost', 'premium', name='paymentpurpose'), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    for col in ('issue_id', 'user_email', 'transaction_id', 'purpose'):
        op.create_index(op.f(f'ix_payments_{col}'), 'payments', [col], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('payments')
    op.drop_table('comments')
    op.drop_table('timeline')
    op.drop_table('issue_upvotes')
    op.drop_table('issues')
    op.drop_table('users')
    sa.Enum(name='paymentpurpose').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='issuepriority').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='issuestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
