"""people and responses

Revision ID: 0001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE = sa.text('deleted_at IS NULL')


def upgrade() -> None:
    op.create_table(
        'people',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('normalized_name', sa.String(length=255), nullable=False),
        sa.Column('partner_id', sa.Uuid(), nullable=True),
        sa.Column('plus_one_allowed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('account_status', sa.String(length=20), server_default=sa.text("'unregistered'"), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.CheckConstraint('partner_id IS NULL OR partner_id <> id', name=op.f('ck_people_partner_not_self')),
        sa.CheckConstraint(
            "account_status IN ('unregistered', 'registered', 'removed')",
            name=op.f('ck_people_account_status'),
        ),
        sa.ForeignKeyConstraint(['partner_id'], ['people.id'],
                                name=op.f('fk_people_partner_id_people'), ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_people')),
    )
    op.create_index('uq_people_active_name', 'people', ['first_name', 'last_name'], unique=True,
                    sqlite_where=_ACTIVE, postgresql_where=_ACTIVE)
    op.create_index('uq_people_active_email', 'people', ['email'], unique=True,
                    sqlite_where=_ACTIVE, postgresql_where=_ACTIVE)
    op.create_index('ix_people_normalized_name', 'people', ['normalized_name'], unique=False)
    op.create_index('ix_people_partner_id', 'people', ['partner_id'], unique=False)
    op.create_index('ix_people_last_first', 'people', ['last_name', 'first_name'], unique=False)
    op.create_index('ix_people_deleted_at', 'people', ['deleted_at'], unique=False)

    op.create_table(
        'responses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('submitted_by_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('dietary_notes', sa.Text(), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('attending', 'not_attending', 'pending')",
            name=op.f('ck_responses_response_status'),
        ),
        sa.ForeignKeyConstraint(['owner_id'], ['people.id'],
                                name=op.f('fk_responses_owner_id_people'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['submitted_by_id'], ['people.id'],
                                name=op.f('fk_responses_submitted_by_id_people'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_responses')),
        sa.UniqueConstraint('owner_id', name='uq_responses_owner_id'),
    )
    op.create_index('ix_responses_submitted_by_id', 'responses', ['submitted_by_id'], unique=False)
    op.create_index('ix_responses_status', 'responses', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_responses_status', table_name='responses')
    op.drop_index('ix_responses_submitted_by_id', table_name='responses')
    op.drop_table('responses')
    op.drop_index('ix_people_deleted_at', table_name='people')
    op.drop_index('ix_people_last_first', table_name='people')
    op.drop_index('ix_people_partner_id', table_name='people')
    op.drop_index('ix_people_normalized_name', table_name='people')
    op.drop_index('uq_people_active_email', table_name='people')
    op.drop_index('uq_people_active_name', table_name='people')
    op.drop_table('people')
