"""Create document registry tables

Revision ID: 002_document_registry
Revises: 001_memo_registry
Create Date: 2025-01-20 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002_document_registry'
down_revision = '001_memo_registry'
branch_labels = None
depends_on = None

document_status = sa.Enum('PENDING', 'UNDER_REVIEW', 'IN_TRANSIT', 'RECEIVED', 'ARCHIVED', name='documentstatus')
movement_status = sa.Enum('SENT', 'RECEIVED', 'REJECTED', name='movementstatus')
# Created by 001_memo_registry
memo_priority = postgresql.ENUM('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='memopriority', create_type=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade():
    op.create_table('documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_number', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_external', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('priority', memo_priority, nullable=False),
        sa.Column('status', document_status, nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_department_id', sa.Integer(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['current_department_id'], ['departments.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_documents_id'), 'documents', ['id'], unique=False)
    op.create_index(op.f('ix_documents_reference_number'), 'documents', ['reference_number'], unique=True)
    op.create_index(op.f('ix_documents_status'), 'documents', ['status'], unique=False)
    op.create_index(op.f('ix_documents_current_department_id'), 'documents', ['current_department_id'], unique=False)
    op.create_index(op.f('ix_documents_created_by_id'), 'documents', ['created_by_id'], unique=False)

    op.create_table('document_movements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('document_id', sa.Integer(), nullable=False),
        sa.Column('from_department_id', sa.Integer(), nullable=True),
        sa.Column('to_department_id', sa.Integer(), nullable=True),
        sa.Column('moved_by_id', sa.Integer(), nullable=False),
        sa.Column('received_by_id', sa.Integer(), nullable=True),
        sa.Column('moved_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', movement_status, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['from_department_id'], ['departments.id'], ),
        sa.ForeignKeyConstraint(['to_department_id'], ['departments.id'], ),
        sa.ForeignKeyConstraint(['moved_by_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['received_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_document_movements_id'), 'document_movements', ['id'], unique=False)
    op.create_index(op.f('ix_document_movements_document_id'), 'document_movements', ['document_id'], unique=False)


def downgrade():
    op.drop_table('document_movements')
    op.drop_table('documents')

    bind = op.get_bind()
    for enum_type in (movement_status, document_status):
        enum_type.drop(bind, checkfirst=True)
