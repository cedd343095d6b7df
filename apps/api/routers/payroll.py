"""
API роутер недельной рассылки расчётов
"""
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Header, Query, Request

from core.auth.cron_auth import verify_cron_secret
from core.config.settings import Settings
from core.logging.logger import logger
from apps.api.schemas import (
    BreakdownSchema,
    ErrorResponse,
    PeriodSchema,
    SalarySnapshotRequest,
    SalarySnapshotResponse,
    WeeklyRunResponse,
)
from shared.services.salary_snapshot_service import LastItem, SalarySnapshotService
from shared.services.weekly_payroll_runner import WeeklyPayrollContext, WeeklyPayrollRunner


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_cron_secret(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    verify_cron_secret(authorization, settings.cron_secret)


async def get_weekly_runner(settings: Settings = Depends(get_settings)) -> AsyncIterator[WeeklyPayrollRunner]:
    async with WeeklyPayrollContext(settings) as runner:
        yield runner


async def get_snapshot_service(
    runner: WeeklyPayrollRunner = Depends(get_weekly_runner),
) -> SalarySnapshotService:
    return SalarySnapshotService.from_runner(runner)


router = APIRouter(
    tags=["payroll"],
    dependencies=[Depends(require_cron_secret)],
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)


@router.get("/cron/send-weekly", response_model=WeeklyRunResponse)
async def send_weekly(
    dry_run: bool = Query(False, alias="dryRun", description="1 — посчитать без отправки"),
    runner: WeeklyPayrollRunner = Depends(get_weekly_runner),
):
    """Рассылка расчётов за прошлую неделю (вызывается внешним планировщиком)."""
    report = await runner.run(dry_run=dry_run)
    return WeeklyRunResponse.from_report(report)


@router.post("/telegram/salary-snapshot", response_model=SalarySnapshotResponse)
async def salary_snapshot(
    body: SalarySnapshotRequest,
    service: SalarySnapshotService = Depends(get_snapshot_service),
):
    """Мгновенный расчёт недели одному сотруднику с отправкой в Telegram."""
    last_item = None
    if body.last_item is not None:
        last_item = LastItem(name=body.last_item.name, qty=body.last_item.qty, total=body.last_item.total)

    result = await service.send_snapshot(
        body.operator_id,
        week_of=body.week_start,
        last_item=last_item,
        dry_run=body.dry_run,
    )
    logger.info("Salary snapshot request completed", staff_id=result.member.id, sent=result.sent)

    return SalarySnapshotResponse(
        sent=result.sent,
        operator_id=result.member.id,
        period=PeriodSchema(date_from=result.window.start, date_to=result.window.end),
        breakdown=BreakdownSchema.from_breakdown(result.breakdown),
        text=result.text if body.dry_run else None,
    )
