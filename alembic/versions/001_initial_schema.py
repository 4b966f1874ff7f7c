"""Initial schema with documents, derived records, representatives and embeddings

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

EMBEDDING_DIMENSION = 1536


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS vector')

    # Create documents table
    op.create_table(
        'documents',
        sa.Column('id', sa.String(length=191), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('original_file_name', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_documents_type'), 'documents', ['type'], unique=False)
    op.create_index(op.f('ix_documents_original_file_name'), 'documents', ['original_file_name'], unique=False)

    # Create embeddings table (document chunks)
    op.create_table(
        'embeddings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('document_id', sa.String(length=191), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSION), nullable=False),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_embeddings_document_id'), 'embeddings', ['document_id'], unique=False)
    op.create_index(
        'embedding_index',
        'embeddings',
        ['embedding'],
        unique=False,
        postgresql_using='hnsw',
        postgresql_ops={'embedding': 'vector_cosine_ops'}
    )

    # Create bills table
    op.create_table(
        'bills',
        sa.Column('id', sa.String(length=191), nullable=False),
        sa.Column('document_id', sa.String(length=191), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('bill_number', sa.String(length=100), nullable=True),
        sa.Column('session_number', sa.String(length=100), nullable=True),
        sa.Column('passage_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bills_document_id'), 'bills', ['document_id'], unique=False)

    # Create proceedings table
    op.create_table(
        'proceedings',
        sa.Column('id', sa.String(length=191), nullable=False),
        sa.Column('document_id', sa.String(length=191), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_proceedings_document_id'), 'proceedings', ['document_id'], unique=False)
    op.create_index(op.f('ix_proceedings_date'), 'proceedings', ['date'], unique=False)

    # Create representatives table
    op.create_table(
        'representatives',
        sa.Column('id', sa.String(length=191), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('name_clean', sa.Text(), nullable=False),
        sa.Column('father_name', sa.Text(), nullable=True),
        sa.Column('constituency', sa.Text(), nullable=False),
        sa.Column('constituency_code', sa.String(length=20), nullable=False),
        sa.Column('constituency_name', sa.Text(), nullable=True),
        sa.Column('district', sa.Text(), nullable=True),
        sa.Column('province', sa.String(length=100), nullable=True),
        sa.Column('party', sa.String(length=100), nullable=False),
        sa.Column('oath_taking_date', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('permanent_address', sa.Text(), nullable=True),
        sa.Column('islamabad_address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_representatives_name_clean'), 'representatives', ['name_clean'], unique=False)
    op.create_index(op.f('ix_representatives_constituency_code'), 'representatives', ['constituency_code'], unique=False)
    op.create_index(op.f('ix_representatives_district'), 'representatives', ['district'], unique=False)
    op.create_index(op.f('ix_representatives_province'), 'representatives', ['province'], unique=False)
    op.create_index(op.f('ix_representatives_party'), 'representatives', ['party'], unique=False)

    # Create representative_embeddings table
    op.create_table(
        'representative_embeddings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('representative_id', sa.String(length=191), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('embedding', Vector(EMBEDDING_DIMENSION), nullable=False),
        sa.Column('content_type', sa.String(length=50), nullable=False),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['representative_id'], ['representatives.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_representative_embeddings_representative_id'),
        'representative_embeddings',
        ['representative_id'],
        unique=False
    )
    op.create_index(
        op.f('ix_representative_embeddings_content_type'),
        'representative_embeddings',
        ['content_type'],
        unique=False
    )
    op.create_index(
        'representative_embedding_index',
        'representative_embeddings',
        ['embedding'],
        unique=False,
        postgresql_using='hnsw',
        postgresql_ops={'embedding': 'vector_cosine_ops'}
    )


def downgrade() -> None:
    op.drop_index('representative_embedding_index', table_name='representative_embeddings')
    op.drop_index(op.f('ix_representative_embeddings_content_type'), table_name='representative_embeddings')
    op.drop_index(op.f('ix_representative_embeddings_representative_id'), table_name='representative_embeddings')
    op.drop_table('representative_embeddings')

    op.drop_index(op.f('ix_representatives_party'), table_name='representatives')
    op.drop_index(op.f('ix_representatives_province'), table_name='representatives')
    op.drop_index(op.f('ix_representatives_district'), table_name='representatives')
    op.drop_index(op.f('ix_representatives_constituency_code'), table_name='representatives')
    op.drop_index(op.f('ix_representatives_name_clean'), table_name='representatives')
    op.drop_table('representatives')

    op.drop_index(op.f('ix_proceedings_date'), table_name='proceedings')
    op.drop_index(op.f('ix_proceedings_document_id'), table_name='proceedings')
    op.drop_table('proceedings')

    op.drop_index(op.f('ix_bills_document_id'), table_name='bills')
    op.drop_table('bills')

    op.drop_index('embedding_index', table_name='embeddings')
    op.drop_index(op.f('ix_embeddings_document_id'), table_name='embeddings')
    op.drop_table('embeddings')

    op.drop_index(op.f('ix_documents_original_file_name'), table_name='documents')
    op.drop_index(op.f('ix_documents_type'), table_name='documents')
    op.drop_table('documents')
