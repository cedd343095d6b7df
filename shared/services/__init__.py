"""Shared services package."""

from .record_store import RecordStore, PostgrestRecordStore
from .payroll_aggregator import PayrollAggregator, calculate_breakdown
from .notification_dispatcher import NotificationDispatcher
from .weekly_payroll_runner import WeeklyPayrollRunner, WeeklyPayrollContext, build_weekly_payroll_runner
from .salary_snapshot_service import SalarySnapshotService

__all__ = [
    'RecordStore',
    'PostgrestRecordStore',
    'PayrollAggregator',
    'calculate_breakdown',
    'NotificationDispatcher',
    'WeeklyPayrollRunner',
    'WeeklyPayrollContext',
    'build_weekly_payroll_runner',
    'SalarySnapshotService',
]
