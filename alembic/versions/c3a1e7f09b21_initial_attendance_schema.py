"""initial_attendance_schema

Revision ID: c3a1e7f09b21
Revises:
Create Date: 2026-10-19 09:00:00.000000

근태 스키마 생성: companies, offices, holidays, work_schedules, employees,
attendances, overtime_requests, visits, activity_logs.
Create the attendance schema.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'c3a1e7f09b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # companies: 회사 (tenant)
    op.create_table(
        'companies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    # offices: 사무실 위치와 지오펜스 반경(m)
    # Office locations with geofence radius in meters
    op.create_table(
        'offices',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('code', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius', sa.Integer(), server_default='100', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    # holidays: 회사 휴일
    op.create_table(
        'holidays',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('holiday_date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_holidays_company_date', 'holidays', ['company_id', 'holiday_date'])

    # work_schedules: 근무 스케줄 (work_days: ISO 요일 1=월..7=일)
    op.create_table(
        'work_schedules',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('work_days', sa.JSON(), nullable=True),
        sa.Column('total_hours', sa.Float(), server_default='8', nullable=False),
        sa.Column('break_minutes', sa.Integer(), server_default='60', nullable=False),
        sa.Column('is_flexible', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('flexible_minutes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
    )

    # employees: 직원 (approver_id: 자기 참조 승인권자)
    op.create_table(
        'employees',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('office_id', UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='SET NULL'), nullable=True),
        sa.Column('work_schedule_id', UUID(as_uuid=True), sa.ForeignKey('work_schedules.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approver_id', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('employee_code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('company_id', 'employee_code', name='uq_employee_company_code'),
    )
    op.create_index('ix_employees_approver', 'employees', ['approver_id'])

    # attendances: 근태 기록 (one record per employee per work date)
    op.create_table(
        'attendances',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('office_id', UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='SET NULL'), nullable=True),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('clock_in', sa.Time(), nullable=True),
        sa.Column('clock_in_lat', sa.Float(), nullable=True),
        sa.Column('clock_in_lng', sa.Float(), nullable=True),
        sa.Column('clock_in_address', sa.Text(), nullable=True),
        sa.Column('clock_out', sa.Time(), nullable=True),
        sa.Column('clock_out_lat', sa.Float(), nullable=True),
        sa.Column('clock_out_lng', sa.Float(), nullable=True),
        sa.Column('clock_out_address', sa.Text(), nullable=True),
        sa.Column('work_duration', sa.Integer(), nullable=True),
        sa.Column('overtime_duration', sa.Integer(), nullable=True),
        sa.Column('uncredited_overtime_duration', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), server_default='present', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    # 유니크 제약: 동일 직원+날짜 중복 방지 (serializes concurrent clock-ins)
    op.create_unique_constraint('uq_attendance_employee_date', 'attendances', ['employee_id', 'work_date'])

    # overtime_requests: 초과근무 신청 (approved_by: 지정된 승인권자)
    op.create_table(
        'overtime_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('approved_by', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
    )
    # 하루 하나의 미결/승인 신청 (at most one open request per employee and date)
    op.create_index(
        'uq_overtime_open_per_day',
        'overtime_requests',
        ['employee_id', 'work_date'],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'approved')"),
    )
    op.create_index('ix_overtime_requests_approver_status', 'overtime_requests', ['approved_by', 'status'])

    # visits: 외근 방문 (attendance_id: 약한 참조, SET NULL)
    op.create_table(
        'visits',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('attendance_id', UUID(as_uuid=True), sa.ForeignKey('attendances.id', ondelete='SET NULL'), nullable=True),
        sa.Column('visit_type', sa.String(30), nullable=False),
        sa.Column('purpose', sa.Text(), nullable=False),
        sa.Column('location_name', sa.String(255), nullable=False),
        sa.Column('location_address', sa.Text(), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('planned_start', sa.DateTime(), nullable=False),
        sa.Column('planned_end', sa.DateTime(), nullable=False),
        sa.Column('actual_start', sa.DateTime(), nullable=True),
        sa.Column('actual_end', sa.DateTime(), nullable=True),
        sa.Column('start_lat', sa.Float(), nullable=True),
        sa.Column('start_lng', sa.Float(), nullable=True),
        sa.Column('start_address', sa.Text(), nullable=True),
        sa.Column('end_lat', sa.Float(), nullable=True),
        sa.Column('end_lng', sa.Float(), nullable=True),
        sa.Column('end_address', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('approved_by', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_visits_employee_status', 'visits', ['employee_id', 'status'])

    # activity_logs: 활동 로그 (커밋 후 기록, business audit trail)
    op.create_table(
        'activity_logs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('employee_id', UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('activity_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('activity_time', sa.DateTime(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('location_address', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_activity_logs_employee_time', 'activity_logs', ['employee_id', 'activity_time'])


def downgrade() -> None:
    op.drop_index('ix_activity_logs_employee_time', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('ix_visits_employee_status', table_name='visits')
    op.drop_table('visits')
    op.drop_index('ix_overtime_requests_approver_status', table_name='overtime_requests')
    op.drop_index('uq_overtime_open_per_day', table_name='overtime_requests')
    op.drop_table('overtime_requests')
    op.drop_constraint('uq_attendance_employee_date', 'attendances', type_='unique')
    op.drop_table('attendances')
    op.drop_index('ix_employees_approver', table_name='employees')
    op.drop_table('employees')
    op.drop_table('work_schedules')
    op.drop_index('ix_holidays_company_date', table_name='holidays')
    op.drop_table('holidays')
    op.drop_table('offices')
    op.drop_table('companies')
