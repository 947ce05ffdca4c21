"""initial_schema

Revision ID: c4d1e8a20f31
Revises:
Create Date: 2026-10-19 09:00:00.000000

매장, 구성원, 시프트, 요청, 근태, 알림 테이블 생성.
Create shop, member, shift, request, time clock and notification tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = 'c4d1e8a20f31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # shops, profiles — 매장 및 사용자 프로필 (profiles.id = 외부 인증 사용자 ID)
    op.create_table(
        'shops',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip', sa.String(20), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('timezone', sa.String(64), server_default='America/New_York', nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'profiles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('avatar_url', sa.String(1000), nullable=True),
        *_timestamps(),
    )

    # departments, positions — 매장 카탈로그 (Shop catalog)
    op.create_table(
        'departments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('pto_accrual_rate', sa.Float(), server_default='0', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0'),
        *_timestamps(),
    )
    op.create_table(
        'positions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), server_default='#6b7280', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0'),
        *_timestamps(),
        sa.UniqueConstraint('shop_id', 'name', name='uq_positions_shop_name'),
    )

    # shop_members — 구성원 (보관 시 is_active=false)
    op.create_table(
        'shop_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(20), server_default='technician', nullable=False),
        sa.Column('department_id', UUID(as_uuid=True), sa.ForeignKey('departments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('hourly_rate', sa.Float(), nullable=True),
        sa.Column('max_hours_per_week', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true')),
        *_timestamps(),
        sa.UniqueConstraint('shop_id', 'user_id', name='uq_shop_members_shop_user'),
    )
    op.create_index('ix_shop_members_shop_active', 'shop_members', ['shop_id', 'is_active'])

    # schedules, shifts — 시프트 및 부속 테이블
    op.create_table(
        'schedules',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), server_default='#3b82f6', nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('schedule_id', UUID(as_uuid=True), sa.ForeignKey('schedules.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('position_id', UUID(as_uuid=True), sa.ForeignKey('positions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('break_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(20), server_default='draft', nullable=False),
        sa.Column('is_open', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('recurrence_group_id', UUID(as_uuid=True), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('end_time > start_time', name='ck_shifts_time_order'),
        sa.CheckConstraint('break_minutes >= 0', name='ck_shifts_break_minutes'),
    )
    op.create_index('ix_shifts_shop_start', 'shifts', ['shop_id', 'start_time'])
    op.create_index('ix_shifts_user_start', 'shifts', ['user_id', 'start_time'])
    op.create_index('ix_shifts_recurrence_group', 'shifts', ['recurrence_group_id'])

    op.create_table(
        'shift_breaks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('label', sa.String(100), server_default='Break', nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('is_paid', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('duration_minutes > 0', name='ck_shift_breaks_duration'),
    )
    op.create_index('ix_shift_breaks_shift', 'shift_breaks', ['shift_id'])

    op.create_table(
        'shift_tags',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('shop_id', 'name', name='uq_shift_tags_shop_name'),
    )
    op.create_table(
        'shift_tag_assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tag_id', UUID(as_uuid=True), sa.ForeignKey('shift_tags.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('shift_id', 'tag_id', name='uq_shift_tag_assignments_shift_tag'),
    )

    # shift_history — 감사 이력 (시프트 삭제 후에도 유지, FK 없음)
    op.create_table(
        'shift_history',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), nullable=False),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('changed_by', UUID(as_uuid=True), nullable=True),
        sa.Column('old_data', JSONB(), nullable=True),
        sa.Column('new_data', JSONB(), nullable=True),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_shift_history_shift', 'shift_history', ['shift_id', 'changed_at'])

    # shift_templates, schedule_templates — 템플릿 (시간은 매장 현지 시각)
    op.create_table(
        'shift_templates',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('position_id', UUID(as_uuid=True), sa.ForeignKey('positions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('break_minutes', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'schedule_templates',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'schedule_template_entries',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('template_id', UUID(as_uuid=True), sa.ForeignKey('schedule_templates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('position_id', UUID(as_uuid=True), sa.ForeignKey('positions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('break_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_schedule_template_entries_day'),
    )

    # 요청 — Claims, swaps, time off, PTO adjustments
    op.create_table(
        'open_shift_claims',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reviewed_by', UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_open_shift_claims_shift_status', 'open_shift_claims', ['shift_id', 'status'])

    op.create_table(
        'swap_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('requester_shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('target_shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('requester_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('reviewed_by', UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'time_off_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('hours_requested', sa.Float(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('is_paid', sa.Boolean(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('reviewed_by', UUID(as_uuid=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewer_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('end_date >= start_date', name='ck_time_off_requests_dates'),
        sa.CheckConstraint('hours_requested > 0', name='ck_time_off_requests_hours'),
    )

    op.create_table(
        'pto_balance_adjustments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('hours', sa.Float(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # time_records, breaks — 근태 기록
    op.create_table(
        'time_records',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('clock_in', sa.DateTime(timezone=True), nullable=False),
        sa.Column('clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(20), server_default='clocked_in', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_manual', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_time_records_shop_user_status', 'time_records', ['shop_id', 'user_id', 'status'])

    op.create_table(
        'breaks',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('time_record_id', UUID(as_uuid=True), sa.ForeignKey('time_records.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_paid', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # notifications — 인앱 알림
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shop_id', UUID(as_uuid=True), sa.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('data', JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_shop_read', 'notifications', ['user_id', 'shop_id', 'is_read'])


def downgrade() -> None:
    # 생성 역순으로 삭제 (Drop in reverse dependency order)
    for table in (
        'notifications',
        'breaks',
        'time_records',
        'pto_balance_adjustments',
        'time_off_requests',
        'swap_requests',
        'open_shift_claims',
        'schedule_template_entries',
        'schedule_templates',
        'shift_templates',
        'shift_history',
        'shift_tag_assignments',
        'shift_tags',
        'shift_breaks',
        'shifts',
        'schedules',
        'shop_members',
        'positions',
        'departments',
        'profiles',
        'shops',
    ):
        op.drop_table(table)
