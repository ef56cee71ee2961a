from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def mask_email(email: str, keep_start: int = 2) -> str:
    """
    Mascara o e-mail do usuário para exibição na trilha de auditoria.
    Exemplo: maria.silva@empresa.com.br -> ma***@empresa.com.br
    """
    e = (email or "").strip()
    if not e:
        return ""
    if keep_start < 0:
        raise ValueError("keep_start must be >= 0")
    local, sep, domain = e.partition("@")
    if len(local) <= keep_start:
        masked = "*" * len(local)
    else:
        masked = f"{local[:keep_start]}***"
    return f"{masked}{sep}{domain}"


@dataclass(frozen=True)
class AuditEntry:
    """Linha da tabela audit_logs."""

    action: str
    details: Optional[str] = None
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_name: str = "Usuário"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "user_email": self.user_email,
            "user_name": self.user_name,
            "action": self.action,
            "details": self.details,
            "created_at": self.created_at,
        }


def build_audit_entry(
    action: str,
    details: Optional[str] = None,
    *,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    user_name: Optional[str] = None,
) -> AuditEntry:
    action = (action or "").strip()
    if not action:
        raise ValueError("audit action is required")
    return AuditEntry(
        action=action,
        details=details,
        user_id=user_id,
        user_email=user_email,
        user_name=(user_name or "").strip() or "Usuário",
    )
