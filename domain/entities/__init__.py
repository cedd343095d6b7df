"""
Модуль доменных сущностей недельного расчёта
"""

from .date_window import DateWindow
from .staff_member import StaffMember, StaffRole
from .shift_record import ShiftRecord, ShiftType
from .debt_record import DebtRecord, DEBT_STATUS_ACTIVE
from .payroll_adjustment import AdjustmentKind, AdjustmentRecord
from .payroll_breakdown import PayrollBreakdown
from .salary_rule import Company, SalaryRule, SalaryRuleBook
from .run_report import DispatchOutcome, OutcomeStatus, RunReport, SkippedRecipient

__all__ = [
    "DateWindow",
    "StaffMember",
    "StaffRole",
    "ShiftRecord",
    "ShiftType",
    "DebtRecord",
    "DEBT_STATUS_ACTIVE",
    "AdjustmentKind",
    "AdjustmentRecord",
    "PayrollBreakdown",
    "Company",
    "SalaryRule",
    "SalaryRuleBook",
    "DispatchOutcome",
    "OutcomeStatus",
    "RunReport",
    "SkippedRecipient",
]
