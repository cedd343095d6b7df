"""Шаблоны уведомлений."""

from .payroll_templates import (
    WeeklyPayrollMessageFormatter,
    WeeklyPayrollTemplates,
    escape_html,
    format_money,
)

__all__ = [
    "WeeklyPayrollMessageFormatter",
    "WeeklyPayrollTemplates",
    "escape_html",
    "format_money",
]
