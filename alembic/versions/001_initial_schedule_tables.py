"""Schedule tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

sport_season = sa.Enum('FALL', 'WINTER', 'SPRING', 'SUMMER', name='sportseason')
team_level = sa.Enum('VARSITY', 'JV', 'FRESHMAN', 'MIDDLE_SCHOOL', 'YOUTH', name='teamlevel')
game_status = sa.Enum('SCHEDULED', 'CONFIRMED', 'POSTPONED', 'CANCELLED', 'COMPLETED', name='gamestatus')


def upgrade() -> None:
    # Organizations
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('timezone', sa.String(length=64), server_default='America/New_York', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    # Users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('google_calendar_refresh_token', sa.Text(), nullable=True),
        sa.Column('google_calendar_access_token', sa.Text(), nullable=True),
        sa.Column('calendar_token_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])

    # Sports
    op.create_table(
        'sports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('season', sport_season, server_default='FALL', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sports_name', 'sports', ['name'])

    # Teams
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sport_id', sa.Integer(), nullable=False),
        sa.Column('level', team_level, server_default='VARSITY', nullable=False),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sport_id'], ['sports.id'], ),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_teams_sport_id', 'teams', ['sport_id'])
    op.create_index('ix_teams_organization_id', 'teams', ['organization_id'])
    op.create_index('ix_teams_org_sport_level', 'teams', ['organization_id', 'sport_id', 'level'])

    # Opponents
    op.create_table(
        'opponents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('mascot', sa.String(length=100), nullable=True),
        sa.Column('colors', sa.String(length=100), nullable=True),
        sa.Column('contact', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_opponents_organization_id', 'opponents', ['organization_id'])

    # Venues
    op.create_table(
        'venues',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('zip_code', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_venues_organization_id', 'venues', ['organization_id'])

    # Custom columns
    op.create_table(
        'custom_columns',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=20), server_default='text', nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_custom_columns_organization_id', 'custom_columns', ['organization_id'])

    # Games
    op.create_table(
        'games',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(length=20), nullable=True),
        sa.Column('status', game_status, server_default='SCHEDULED', nullable=False),
        sa.Column('is_home', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('custom_data', postgresql.JSONB(astext_type=sa.Text()), server_default='{}', nullable=False),
        sa.Column('travel_required', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('bus_travel', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('estimated_travel_time', sa.Integer(), nullable=True),
        sa.Column('departure_time', sa.DateTime(), nullable=True),
        sa.Column('arrival_time', sa.DateTime(), nullable=True),
        sa.Column('bus_count', sa.Integer(), nullable=True),
        sa.Column('travel_cost', sa.Float(), nullable=True),
        sa.Column('home_team_id', sa.Integer(), nullable=False),
        sa.Column('opponent_id', sa.Integer(), nullable=True),
        sa.Column('venue_id', sa.Integer(), nullable=True),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        sa.Column('google_calendar_event_id', sa.String(length=255), nullable=True),
        sa.Column('google_calendar_html_link', sa.String(length=500), nullable=True),
        sa.Column('calendar_synced', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['home_team_id'], ['teams.id'], ),
        sa.ForeignKeyConstraint(['opponent_id'], ['opponents.id'], ),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id'], ),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_games_home_team_id', 'games', ['home_team_id'])
    op.create_index('ix_games_opponent_id', 'games', ['opponent_id'])
    op.create_index('ix_games_venue_id', 'games', ['venue_id'])
    op.create_index('ix_games_created_by_id', 'games', ['created_by_id'])
    op.create_index('ix_games_home_team_date', 'games', ['home_team_id', 'date'])


def downgrade() -> None:
    op.drop_table('games')
    op.drop_table('custom_columns')
    op.drop_table('venues')
    op.drop_table('opponents')
    op.drop_table('teams')
    op.drop_table('sports')
    op.drop_table('users')
    op.drop_table('organizations')
    game_status.drop(op.get_bind(), checkfirst=True)
    team_level.drop(op.get_bind(), checkfirst=True)
    sport_season.drop(op.get_bind(), checkfirst=True)
