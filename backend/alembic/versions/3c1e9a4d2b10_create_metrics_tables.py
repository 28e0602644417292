"""create activities, sample and metric cache tables

Revision ID: 3c1e9a4d2b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1e9a4d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


SAMPLE_TABLES = [
    'garmin_activity_details',
    'polar_activity_details',
    'strava_activity_streams',
    'strava_gpx_samples',
    'zepp_gpx_samples',
    'healthkit_activity_samples',
]

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _sample_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=False),
        sa.Column('sample_timestamp', sa.BigInteger(), nullable=False),
        sa.Column('heart_rate', sa.Integer(), nullable=True),
        sa.Column('speed_meters_per_second', sa.Float(), nullable=True),
        sa.Column('total_distance_in_meters', sa.Float(), nullable=True),
        sa.Column('latitude_in_degree', sa.Float(), nullable=True),
        sa.Column('longitude_in_degree', sa.Float(), nullable=True),
        sa.Column('elevation_in_meters', sa.Float(), nullable=True),
        sa.Column('power_in_watts', sa.Float(), nullable=True),
        sa.Column('steps_per_minute', sa.Float(), nullable=True),
        sa.Column('timer_duration_in_seconds', sa.Float(), nullable=True),
        sa.Column('moving_duration_in_seconds', sa.Float(), nullable=True),
        sa.Column('clock_duration_in_seconds', sa.Float(), nullable=True),
    ]


def _key_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=False),
        sa.Column('activity_source', sa.String(length=20), nullable=False),
    ]


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()

    if 'activities' not in tables:
        op.create_table(
            'activities',
            *_key_columns(),
            sa.Column('activity_type', sa.String(), nullable=True),
            sa.Column('activity_date', sa.Date(), nullable=True),
            sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('total_distance_meters', sa.Float(), nullable=True),
            sa.Column('total_time_seconds', sa.Float(), nullable=True),
            sa.Column('average_heart_rate', sa.Integer(), nullable=True),
            sa.Column('max_heart_rate', sa.Integer(), nullable=True),
            sa.Column('elevation_gain_meters', sa.Float(), nullable=True),
            _created_at(),
            sa.UniqueConstraint('user_id', 'activity_id', 'activity_source', name='uq_activity_natural_key'),
        )
        op.create_index('ix_activities_user_id', 'activities', ['user_id'])
        op.create_index('ix_activities_activity_id', 'activities', ['activity_id'])
        op.create_index('ix_activities_source_start', 'activities', ['activity_source', 'start_time'])

    for name in SAMPLE_TABLES:
        if name not in tables:
            op.create_table(name, *_sample_columns())
            op.create_index(f'ix_{name}_activity_ts', name, ['activity_id', 'sample_timestamp'])

    if 'activity_variation_analysis' not in tables:
        op.create_table(
            'activity_variation_analysis',
            *_key_columns(),
            sa.Column('heart_rate_cv', sa.Float(), nullable=True),
            sa.Column('heart_rate_category', sa.String(length=10), nullable=True),
            sa.Column('pace_cv', sa.Float(), nullable=True),
            sa.Column('pace_category', sa.String(length=10), nullable=True),
            sa.Column('diagnosis', sa.String(), nullable=True),
            sa.Column('data_points_count', sa.Integer(), server_default='0', nullable=False),
            sa.Column('has_valid_data', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('has_heart_rate_data', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('has_pace_data', sa.Boolean(), server_default=sa.false(), nullable=False),
            _created_at(),
            sa.UniqueConstraint('user_id', 'activity_id', 'activity_source', name='uq_variation_natural_key'),
        )

    if 'activity_heart_rate_zones' not in tables:
        op.create_table(
            'activity_heart_rate_zones',
            *_key_columns(),
            sa.Column('max_heart_rate', sa.Integer(), nullable=False),
            sa.Column('zones', JSON_TYPE, nullable=False),
            sa.Column('total_valid_seconds', sa.Float(), server_default='0', nullable=False),
            sa.Column('out_of_range_seconds', sa.Float(), server_default='0', nullable=False),
            _created_at(),
            sa.UniqueConstraint('user_id', 'activity_id', 'activity_source', name='uq_hr_zones_natural_key'),
        )

    if 'activity_best_segments' not in tables:
        op.create_table(
            'activity_best_segments',
            *_key_columns(),
            sa.Column('activity_date', sa.Date(), nullable=True),
            sa.Column('segment_start_distance_meters', sa.Float(), nullable=False),
            sa.Column('segment_end_distance_meters', sa.Float(), nullable=False),
            sa.Column('segment_duration_seconds', sa.Float(), nullable=False),
            sa.Column('best_1km_pace_min_km', sa.Float(), nullable=False),
            _created_at(),
            sa.UniqueConstraint('user_id', 'activity_id', name='uq_best_segment_natural_key'),
        )

    if 'fitness_scores_daily' not in tables:
        op.create_table(
            'fitness_scores_daily',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(), nullable=False),
            sa.Column('calendar_date', sa.Date(), nullable=False),
            sa.Column('fitness', sa.Float(), nullable=False),
            sa.Column('fatigue', sa.Float(), nullable=False),
            sa.Column('performance', sa.Float(), nullable=False),
            sa.Column('daily_strain', sa.Float(), server_default='0', nullable=False),
            sa.Column('load_model', sa.String(length=20), server_default='trimp', nullable=False),
            sa.Column('activities_count', sa.Integer(), server_default='0', nullable=False),
            sa.Column('fitness_score', sa.Float(), server_default='0', nullable=False),
            sa.Column('capacity_score', sa.Float(), server_default='0', nullable=False),
            sa.Column('consistency_score', sa.Float(), server_default='0', nullable=False),
            sa.Column('recovery_balance_score', sa.Float(), server_default='0', nullable=False),
            _created_at(),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.UniqueConstraint('user_id', 'calendar_date', name='uq_fitness_user_date'),
        )

    if 'average_pace' not in tables:
        op.create_table(
            'average_pace',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('category', sa.String(length=20), nullable=False),
            sa.Column('average_pace_value', sa.Float(), nullable=False),
            sa.Column('pace_unit', sa.String(length=20), nullable=False),
            sa.Column('period_start', sa.Date(), nullable=False),
            sa.Column('period_end', sa.Date(), nullable=False),
            sa.Column('total_activities', sa.Integer(), nullable=False),
            sa.Column('total_distance_meters', sa.Float(), nullable=False),
            sa.Column('total_time_minutes', sa.Float(), nullable=False),
            sa.Column('calculated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        )
        op.create_index('ix_average_pace_category', 'average_pace', ['category'])


def downgrade() -> None:
    # Safe drops if exist
    for name in [
        'average_pace',
        'fitness_scores_daily',
        'activity_best_segments',
        'activity_heart_rate_zones',
        'activity_variation_analysis',
        *SAMPLE_TABLES,
        'activities',
    ]:
        op.execute(f'DROP TABLE IF EXISTS {name}')
