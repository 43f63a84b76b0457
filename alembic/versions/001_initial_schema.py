"""Create players, tournaments and joinings tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'players',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('balance', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('balance >= 0', name='players_balance_non_negative'),
        sa.PrimaryKeyConstraint('id', name='players_pkey'),
    )
    op.create_table(
        'tournaments',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('deposit', sa.BigInteger(), nullable=False),
        sa.Column('winner_id', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('deposit >= 0', name='tournaments_deposit_non_negative'),
        sa.PrimaryKeyConstraint('id', name='tournaments_pkey'),
    )
    op.create_table(
        'joinings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tournament_id', sa.String(64), nullable=False),
        sa.Column('player_id', sa.String(64), nullable=False),
        sa.Column('contributed_amount', sa.BigInteger(), nullable=False),
        sa.Column('leader_id', sa.String(64), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['tournament_id'], ['tournaments.id'],
            name='joinings_tournament_id_fkey', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['player_id'], ['players.id'],
            name='joinings_player_id_fkey', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='joinings_pkey'),
    )
    op.create_index(
        'ix_joinings_tournament_player', 'joinings', ['tournament_id', 'player_id']
    )
    op.create_index(
        'ix_joinings_tournament_leader', 'joinings', ['tournament_id', 'leader_id']
    )


def downgrade() -> None:
    op.drop_index('ix_joinings_tournament_player', table_name='joinings')
    op.drop_index('ix_joinings_tournament_leader', table_name='joinings')
    op.drop_table('joinings')
    op.drop_table('tournaments')
    op.drop_table('players')
