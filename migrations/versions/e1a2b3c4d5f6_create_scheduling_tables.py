"""create scheduling tables

Revision ID: e1a2b3c4d5f6
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'e1a2b3c4d5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'seasons',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('start_month', sa.String(length=7), nullable=False),
        sa.Column('end_month', sa.String(length=7), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'schedule_templates',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('season_id', sa.String(length=64), nullable=False),
        sa.Column('day_type', sa.String(length=20), nullable=False),
        sa.Column('time_slot', sa.String(length=11), nullable=False),
        sa.Column('category_id', sa.String(length=64), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('is_break', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('capacity >= 0', name='ck_template_capacity'),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('schedule_templates', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_schedule_templates_season_id'), ['season_id'], unique=False)

    op.create_table(
        'daily_slots',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_id', sa.String(length=16), nullable=False),
        sa.Column('time_slot', sa.String(length=11), nullable=False),
        sa.Column('day_type', sa.String(length=20), nullable=True),
        sa.Column('season_id', sa.String(length=64), nullable=True),
        sa.Column('category_id', sa.String(length=64), nullable=True),
        sa.Column('schedule_template_id', sa.String(length=36), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('is_break', sa.Boolean(), nullable=False),
        sa.Column('origin', sa.String(length=20), nullable=False),
        sa.Column('attendee_ids', sa.JSON(), nullable=False),
        sa.Column('locks', sa.JSON(), nullable=False),
        sa.Column('attendees_deducted', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('capacity >= 0', name='ck_slot_capacity'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('daily_slots', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_daily_slots_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_daily_slots_season_id'), ['season_id'], unique=False)

    op.create_table(
        'students',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('full_name', sa.String(length=160), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('remaining_credits', sa.Integer(), nullable=False),
        sa.Column('has_debt', sa.Boolean(), nullable=False),
        sa.Column('fixed_schedule', sa.JSON(), nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('students', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_students_active'), ['active'], unique=False)

    op.create_table(
        'attendances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.String(length=32), nullable=False),
        sa.Column('slot_id', sa.String(length=64), nullable=False),
        sa.Column('checked_by', sa.String(length=64), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('attendances', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_attendances_student_id'), ['student_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_attendances_slot_id'), ['slot_id'], unique=False)

    op.create_table(
        'system_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=500), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('system_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_system_logs_timestamp'), ['timestamp'], unique=False)


def downgrade():
    with op.batch_alter_table('system_logs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_system_logs_timestamp'))
    op.drop_table('system_logs')

    with op.batch_alter_table('attendances', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_attendances_slot_id'))
        batch_op.drop_index(batch_op.f('ix_attendances_student_id'))
    op.drop_table('attendances')

    with op.batch_alter_table('students', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_students_active'))
    op.drop_table('students')

    with op.batch_alter_table('daily_slots', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_daily_slots_season_id'))
        batch_op.drop_index(batch_op.f('ix_daily_slots_date'))
    op.drop_table('daily_slots')

    with op.batch_alter_table('schedule_templates', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_schedule_templates_season_id'))
    op.drop_table('schedule_templates')

    op.drop_table('seasons')
