"""Сотрудник (оператор) из внешнего справочника."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from domain.entities.base import clean_text


class StaffRole(str, Enum):
    """Известные роли сотрудников. В справочнике могут встречаться и другие."""
    ADMIN = "admin"
    WORKER = "worker"
    MANAGER = "manager"
    OWNER = "owner"


def parse_role(value: Any) -> Optional[Union[StaffRole, str]]:
    """Известная роль -> StaffRole, незнакомая -> строка в нижнем регистре."""
    text = clean_text(value)
    if not text:
        return None
    text = text.lower()
    try:
        return StaffRole(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    role: Optional[Union[StaffRole, str]] = None
    is_active: bool = True
    telegram_chat_id: Optional[str] = None
    short_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.short_name or self.name or "Оператор"

    @property
    def role_code(self) -> Optional[str]:
        if self.role is None:
            return None
        return self.role.value if isinstance(self.role, StaffRole) else str(self.role).lower()

    @property
    def has_chat(self) -> bool:
        """Есть непустой адрес канала уведомлений."""
        return bool(self.telegram_chat_id and self.telegram_chat_id.strip())

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "StaffMember":
        chat_id = row.get("telegram_chat_id")
        return cls(
            id=str(row["id"]),
            name=clean_text(row.get("name")) or "",
            role=parse_role(row.get("role")),
            is_active=bool(row.get("is_active", True)),
            telegram_chat_id=str(chat_id).strip() if chat_id is not None else None,
            short_name=clean_text(row.get("short_name")),
        )

    def __repr__(self) -> str:
        return f"<StaffMember(id='{self.id}', name='{self.name}', role={self.role_code})>"
