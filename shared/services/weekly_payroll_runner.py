"""Недельная рассылка расчётов зарплаты сотрудникам.

Прогон строго последовательный:

    окно недели -> список получателей -> для каждого:
        расчёт -> сообщение -> отправка (или dry run) -> исход
    -> отчёт

Ошибка одного получателя не прерывает рассылку. Ошибки подготовки
(получение списка сотрудников) прерывают прогон целиком.
"""

from __future__ import annotations

from contextlib import AsyncExitStack
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import pytz

from core.config.settings import Settings
from core.exceptions import DispatchError, UpstreamFetchError
from core.logging.logger import logger
from core.utils.rate_limiter import SendIntervalLimiter
from core.utils.timezone_helper import previous_week_window
from domain.entities import DateWindow, DispatchOutcome, RunReport, StaffMember
from shared.services.notification_dispatcher import NotificationDispatcher
from shared.services.payroll_aggregator import PayrollAggregator
from shared.services.record_store import PostgrestRecordStore, RecordStore
from shared.services.senders.telegram_sender import TelegramNotificationSender
from shared.templates.notifications.payroll_templates import WeeklyPayrollMessageFormatter


def split_recipients(
    staff: Iterable[StaffMember], roles: Iterable[str]
) -> Tuple[List[StaffMember], List[StaffMember]]:
    """Активные сотрудники нужных ролей: (с chat_id, без chat_id)."""
    allowed = {r.lower() for r in roles}
    eligible = [
        m for m in staff
        if m.is_active and m.role_code in allowed
    ]
    targets = [m for m in eligible if m.has_chat]
    skipped = [m for m in eligible if not m.has_chat]
    return targets, skipped


class WeeklyPayrollRunner:
    """Оркестратор недельной рассылки."""

    def __init__(
        self,
        store: RecordStore,
        aggregator: PayrollAggregator,
        formatter: WeeklyPayrollMessageFormatter,
        dispatcher: NotificationDispatcher,
        utc_offset_hours: int,
        payroll_roles: Iterable[str] = ("admin", "worker"),
    ):
        self.store = store
        self.aggregator = aggregator
        self.formatter = formatter
        self.dispatcher = dispatcher
        self.utc_offset_hours = utc_offset_hours
        self.payroll_roles = tuple(payroll_roles)

    async def run(self, dry_run: bool = False, now: Optional[datetime] = None) -> RunReport:
        """
        Прогон рассылки за прошлую неделю.

        Args:
            dry_run: всё посчитать, но ничего не отправлять
            now: текущий момент (по умолчанию — сейчас, UTC)

        Raises:
            UpstreamFetchError: не удалось получить список сотрудников
        """
        window = previous_week_window(now or datetime.now(pytz.UTC), self.utc_offset_hours)
        logger.info("Weekly payroll run: window resolved", window=str(window), dry_run=dry_run)

        staff = await self.store.list_active_staff()
        targets, skipped = split_recipients(staff, self.payroll_roles)
        logger.info(
            "Weekly payroll run: recipients listed",
            staff_total=len(staff),
            targets=len(targets),
            skipped_no_chat_id=len(skipped),
        )

        outcomes = []
        for member in targets:
            outcomes.append(await self.process_recipient(member, window, dry_run))

        report = RunReport.build(window, outcomes, skipped=skipped, dry_run=dry_run)
        logger.info(
            "Weekly payroll run: reported",
            window=str(window),
            dry_run=dry_run,
            total_targets=report.total_targets,
            sent=report.sent,
            failed=report.failed,
            skipped=len(report.skipped),
        )
        return report

    async def process_recipient(
        self, member: StaffMember, window: DateWindow, dry_run: bool = False
    ) -> DispatchOutcome:
        """Расчёт, рендеринг и отправка одному получателю. Никогда не бросает."""
        try:
            breakdown = await self.aggregator.aggregate(member, window)
            text = self.formatter.render(member, window, breakdown)

            if dry_run:
                logger.info("Dry run: message not sent", staff_id=member.id)
                return DispatchOutcome.sent(member, dry_run=True)

            await self.dispatcher.dispatch(member.telegram_chat_id.strip(), text)
            return DispatchOutcome.sent(member)

        except UpstreamFetchError as e:
            logger.error("Payroll aggregation failed", staff_id=member.id, error=str(e))
            return DispatchOutcome.failed(member, e)
        except DispatchError as e:
            logger.error("Payroll message dispatch failed", staff_id=member.id, error=str(e))
            return DispatchOutcome.failed(member, e)
        except Exception as e:
            logger.exception("Unexpected error while processing recipient", staff_id=member.id)
            return DispatchOutcome.failed(member, e)


class WeeklyPayrollContext:
    """Собирает runner из настроек и закрывает HTTP-клиенты на выходе.

    ``async with WeeklyPayrollContext(settings) as runner: ...``
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[RecordStore] = None,
        sender: Optional[TelegramNotificationSender] = None,
    ):
        self.settings = settings
        self._store = store
        self._sender = sender
        self._stack = AsyncExitStack()

    async def __aenter__(self) -> WeeklyPayrollRunner:
        s = self.settings
        store = self._store
        if store is None:
            store = await self._stack.enter_async_context(
                PostgrestRecordStore(
                    s.record_store_url,
                    s.record_store_key,
                    staff_collection=s.staff_collection,
                    shifts_collection=s.shifts_collection,
                    debts_collection=s.debts_collection,
                    adjustments_collection=s.adjustments_collection,
                    salary_rules_collection=s.salary_rules_collection,
                    companies_collection=s.companies_collection,
                    timeout=s.http_timeout_seconds,
                )
            )
        sender = self._sender
        if sender is None:
            sender = await self._stack.enter_async_context(
                TelegramNotificationSender(
                    s.telegram_bot_token,
                    api_base=s.telegram_api_base,
                    timeout=s.http_timeout_seconds,
                )
            )
        return build_weekly_payroll_runner(s, store, sender)

    async def __aexit__(self, *exc_info) -> None:
        await self._stack.aclose()


def build_weekly_payroll_runner(settings: Settings, store: RecordStore, sender) -> WeeklyPayrollRunner:
    """Сборка runner'а из готовых шлюзов и настроек."""
    return WeeklyPayrollRunner(
        store=store,
        aggregator=PayrollAggregator(
            store,
            base_pay_per_shift=settings.base_pay_per_shift,
            shift_rate_overrides=settings.shift_rate_overrides,
            negative_payout_policy=settings.negative_payout_policy,
            use_salary_rules=settings.salary_rules_enabled,
        ),
        formatter=WeeklyPayrollMessageFormatter(
            currency_suffix=settings.currency_suffix,
            include_notes=settings.include_adjustment_notes,
        ),
        dispatcher=NotificationDispatcher(
            sender, SendIntervalLimiter(settings.dispatch_min_interval)
        ),
        utc_offset_hours=settings.business_utc_offset_hours,
        payroll_roles=settings.payroll_roles,
    )
