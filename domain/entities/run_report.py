"""Итоги прогона рассылки."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from domain.entities.date_window import DateWindow
from domain.entities.staff_member import StaffMember

ERROR_DETAIL_MAX_LENGTH = 400


class OutcomeStatus(str, Enum):
    SENT = "sent"
    DRY_RUN = "dry_run"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchOutcome:
    staff_id: str
    name: str
    status: OutcomeStatus
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    @classmethod
    def sent(cls, member: StaffMember, dry_run: bool = False) -> "DispatchOutcome":
        status = OutcomeStatus.DRY_RUN if dry_run else OutcomeStatus.SENT
        return cls(staff_id=member.id, name=member.name, status=status)

    @classmethod
    def failed(cls, member: StaffMember, error: Any) -> "DispatchOutcome":
        return cls(
            staff_id=member.id,
            name=member.name,
            status=OutcomeStatus.FAILED,
            error=str(error)[:ERROR_DETAIL_MAX_LENGTH],
        )


@dataclass(frozen=True)
class SkippedRecipient:
    staff_id: str
    name: str


@dataclass(frozen=True)
class RunReport:
    window: DateWindow
    dry_run: bool = False
    total_targets: int = 0
    sent: int = 0
    failed: int = 0
    skipped: Tuple[SkippedRecipient, ...] = ()
    outcomes: Tuple[DispatchOutcome, ...] = field(default=(), repr=False)

    @classmethod
    def build(
        cls,
        window: DateWindow,
        outcomes: Iterable[DispatchOutcome],
        skipped: Iterable[StaffMember] = (),
        dry_run: bool = False,
    ) -> "RunReport":
        """Сворачивает исходы по получателям в отчёт."""
        outcomes = tuple(outcomes)
        sent = sum(1 for o in outcomes if o.is_success)
        return cls(
            window=window,
            dry_run=dry_run,
            total_targets=len(outcomes),
            sent=sent,
            failed=len(outcomes) - sent,
            skipped=tuple(SkippedRecipient(staff_id=m.id, name=m.name) for m in skipped),
            outcomes=outcomes,
        )

    @property
    def errors(self) -> List[DispatchOutcome]:
        return [o for o in self.outcomes if not o.is_success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "dry_run": self.dry_run,
            "period": self.window.to_dict(),
            "total_targets": self.total_targets,
            "sent": self.sent,
            "failed": self.failed,
            "skipped_no_chat_id": [{"id": s.staff_id, "name": s.name} for s in self.skipped],
            "errors": [{"id": o.staff_id, "name": o.name, "error": o.error or ""} for o in self.errors],
        }
