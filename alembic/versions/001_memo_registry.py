"""Create memo registry tables

Revision ID: 001_memo_registry
Revises:
Create Date: 2025-01-06 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_memo_registry'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('MD', 'DEPARTMENT_HEAD', 'STAFF', 'ADMIN', 'AUDITOR', name='userrole')
memo_type = sa.Enum('APPROVAL', 'EXTERNAL_LETTER', 'AUDIT_LETTER', 'INTERNAL', 'CIRCULAR', name='memotype')
memo_priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='memopriority')
memo_status = sa.Enum('DRAFT', 'PENDING_APPROVAL', 'APPROVED', 'REJECTED', 'SENT', 'ARCHIVED', name='memostatus')
approval_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'SKIPPED', name='approvalstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade():
    op.create_table('departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_departments_id'), 'departments', ['id'], unique=False)
    op.create_index(op.f('ix_departments_code'), 'departments', ['code'], unique=True)

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('signature_path', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_department_id'), 'users', ['department_id'], unique=False)

    op.create_table('memos',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_number', sa.String(length=50), nullable=False),
        sa.Column('subject', sa.String(length=500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('type', memo_type, nullable=False),
        sa.Column('priority', memo_priority, nullable=False),
        sa.Column('status', memo_status, nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_memos_id'), 'memos', ['id'], unique=False)
    op.create_index(op.f('ix_memos_reference_number'), 'memos', ['reference_number'], unique=True)
    op.create_index(op.f('ix_memos_status'), 'memos', ['status'], unique=False)
    op.create_index(op.f('ix_memos_department_id'), 'memos', ['department_id'], unique=False)
    op.create_index(op.f('ix_memos_created_by_id'), 'memos', ['created_by_id'], unique=False)

    op.create_table('memo_recipients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('memo_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['memo_id'], ['memos.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_memo_recipients_id'), 'memo_recipients', ['id'], unique=False)
    op.create_index(op.f('ix_memo_recipients_memo_id'), 'memo_recipients', ['memo_id'], unique=False)
    op.create_index(op.f('ix_memo_recipients_user_id'), 'memo_recipients', ['user_id'], unique=False)

    op.create_table('memo_approvals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('memo_id', sa.Integer(), nullable=False),
        sa.Column('approver_id', sa.Integer(), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.Column('status', approval_status, nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['memo_id'], ['memos.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approver_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_memo_approvals_id'), 'memo_approvals', ['id'], unique=False)
    op.create_index(op.f('ix_memo_approvals_memo_id'), 'memo_approvals', ['memo_id'], unique=False)
    op.create_index(op.f('ix_memo_approvals_approver_id'), 'memo_approvals', ['approver_id'], unique=False)

    op.create_table('memo_comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('memo_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['memo_id'], ['memos.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_memo_comments_id'), 'memo_comments', ['id'], unique=False)
    op.create_index(op.f('ix_memo_comments_memo_id'), 'memo_comments', ['memo_id'], unique=False)
    op.create_index(op.f('ix_memo_comments_user_id'), 'memo_comments', ['user_id'], unique=False)

    op.create_table('reference_sequences',
        sa.Column('scope', sa.String(length=20), nullable=False),
        sa.Column('year', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('scope', 'year')
    )


def downgrade():
    op.drop_table('reference_sequences')
    op.drop_table('memo_comments')
    op.drop_table('memo_approvals')
    op.drop_table('memo_recipients')
    op.drop_table('memos')
    op.drop_table('users')
    op.drop_table('departments')

    bind = op.get_bind()
    for enum_type in (approval_status, memo_status, memo_priority, memo_type, user_role):
        enum_type.drop(bind, checkfirst=True)
