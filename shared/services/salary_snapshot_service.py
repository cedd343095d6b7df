"""Мгновенный снимок зарплаты за неделю одному сотруднику (по запросу, вне расписания)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from core.exceptions import RecipientUnreachableError, StaffNotFoundError
from core.logging.logger import logger
from core.utils.timezone_helper import TimezoneHelper, week_window_for
from domain.entities import DateWindow, PayrollBreakdown, StaffMember
from shared.services.notification_dispatcher import NotificationDispatcher
from shared.services.payroll_aggregator import PayrollAggregator
from shared.services.record_store import RecordStore
from shared.services.weekly_payroll_runner import WeeklyPayrollRunner
from shared.templates.notifications.payroll_templates import WeeklyPayrollMessageFormatter


@dataclass(frozen=True)
class LastItem:
    """Позиция, только что взятая в долг."""
    name: str
    qty: int
    total: Decimal


@dataclass(frozen=True)
class SnapshotResult:
    member: StaffMember
    window: DateWindow
    breakdown: PayrollBreakdown
    text: str
    sent: bool


class SalarySnapshotService:
    def __init__(
        self,
        store: RecordStore,
        aggregator: PayrollAggregator,
        formatter: WeeklyPayrollMessageFormatter,
        dispatcher: NotificationDispatcher,
        utc_offset_hours: int,
    ):
        self.store = store
        self.aggregator = aggregator
        self.formatter = formatter
        self.dispatcher = dispatcher
        self.timezone = TimezoneHelper(utc_offset_hours)

    @classmethod
    def from_runner(cls, runner: WeeklyPayrollRunner) -> "SalarySnapshotService":
        return cls(
            store=runner.store,
            aggregator=runner.aggregator,
            formatter=runner.formatter,
            dispatcher=runner.dispatcher,
            utc_offset_hours=runner.utc_offset_hours,
        )

    async def resolve_member(self, reference: str) -> StaffMember:
        """Сотрудник по id или по telegram_chat_id (только цифры)."""
        reference = reference.strip()
        if reference.lstrip("-").isdigit():
            member = await self.store.get_staff_member_by_chat_id(reference)
            lookup = f"telegram_chat_id={reference}"
        else:
            member = await self.store.get_staff_member(reference)
            lookup = f"id={reference}"
        if member is None:
            raise StaffNotFoundError(lookup)
        return member

    async def send_snapshot(
        self,
        reference: str,
        week_of: Optional[date] = None,
        last_item: Optional[LastItem] = None,
        dry_run: bool = False,
    ) -> SnapshotResult:
        """
        Считает неделю, которой принадлежит ``week_of`` (по умолчанию — текущая
        неделя бизнес-зоны), и отправляет сообщение сотруднику.

        Raises:
            StaffNotFoundError, RecipientUnreachableError, UpstreamFetchError, DispatchError
        """
        member = await self.resolve_member(reference)
        if not member.has_chat:
            raise RecipientUnreachableError(member.id)

        window = week_window_for(week_of or self.timezone.today_local())
        breakdown = await self.aggregator.aggregate(member, window)

        extra_lines: List[str] = []
        if last_item is not None and last_item.name:
            extra_lines.append(
                self.formatter.render_last_item(last_item.name, last_item.qty, last_item.total)
            )
        text = self.formatter.render(member, window, breakdown, extra_lines=extra_lines)

        if not dry_run:
            await self.dispatcher.dispatch(member.telegram_chat_id.strip(), text)

        logger.info(
            "Salary snapshot processed",
            staff_id=member.id,
            window=str(window),
            dry_run=dry_run,
            net_payout=float(breakdown.net_payout),
        )
        return SnapshotResult(
            member=member, window=window, breakdown=breakdown, text=text, sent=not dry_run
        )
