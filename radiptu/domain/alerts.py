# radiptu/domain/alerts.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Collection, List, Optional, Sequence

from radiptu.domain.apportionment import effective_amount
from radiptu.domain.models import IptuStatus, Property
from radiptu.utils.parse_utils import parse_date

logger = logging.getLogger(__name__)

WARNING_DAYS = 15
COUNTDOWN_DAYS = 10


@dataclass(frozen=True)
class Alert:
    id: str
    type: str  # "warning" | "error"
    title: str
    message: str
    property_id: str
    days_diff: int
    read: bool = False


@dataclass(frozen=True)
class DueEvent:
    id: str
    property_id: str
    property_name: str
    city: str
    sequential: str
    due_date: date
    value: float
    status: IptuStatus
    year: int


def _days(n: int) -> str:
    return "dia" if n == 1 else "dias"


def build_alerts(
    properties: Sequence[Property],
    today: date,
    read_ids: Collection[str] = (),
    warning_days: int = WARNING_DAYS,
    countdown_days: int = COUNTDOWN_DAYS,
) -> List[Alert]:
    """
    Alertas de vencimento para sequenciais ainda não pagos.

      diff == warning_days         -> aviso "vence em 15 dias"
      1 <= diff <= countdown_days  -> contagem regressiva diária
      diff == 0                    -> erro "vence hoje"
      diff < 0                     -> erro "vencido há N dias"
    """
    alerts: List[Alert] = []

    for prop in properties:
        for unit in prop.units:
            if IptuStatus.parse(unit.status) is IptuStatus.PAGO:
                continue
            due = parse_date(unit.due_date)
            if due is None:
                continue

            diff = (due - today).days
            base_id = f"{prop.id}-{unit.sequential}-{unit.year}"
            alert: Optional[Alert] = None

            if diff == warning_days:
                alert = Alert(
                    id=f"{base_id}-{warning_days}",
                    type="warning",
                    title=prop.name,
                    message=f"IPTU sequencial {unit.sequential}, vence em {diff} dias.",
                    property_id=prop.id,
                    days_diff=diff,
                )
            elif 1 <= diff <= countdown_days:
                alert = Alert(
                    id=f"{base_id}-countdown-{diff}",
                    type="warning",
                    title=prop.name,
                    message=f"IPTU sequencial {unit.sequential}, vence em {diff} {_days(diff)}.",
                    property_id=prop.id,
                    days_diff=diff,
                )
            elif diff == 0:
                alert = Alert(
                    id=f"{base_id}-today",
                    type="error",
                    title=prop.name,
                    message=f"IPTU sequencial {unit.sequential}, vence hoje!",
                    property_id=prop.id,
                    days_diff=0,
                )
            elif diff < 0:
                overdue = -diff
                alert = Alert(
                    id=f"{base_id}-overdue-{overdue}",
                    type="error",
                    title=prop.name,
                    message=f"IPTU sequencial {unit.sequential}, está vencido há {overdue} {_days(overdue)}.",
                    property_id=prop.id,
                    days_diff=diff,
                )

            if alert is not None:
                alerts.append(_mark_read(alert, read_ids))

    logger.debug("[ALERTS] %d alertas em %s", len(alerts), today.isoformat())
    return alerts


def _mark_read(alert: Alert, read_ids: Collection[str]) -> Alert:
    return replace(alert, read=True) if alert.id in read_ids else alert


def alert_property_ids(alerts: Sequence[Alert]) -> List[str]:
    """Imóveis com alerta não lido (filtro "somente alertas" da listagem)."""
    out: List[str] = []
    for a in alerts:
        if not a.read and a.property_id not in out:
            out.append(a.property_id)
    return out


# ---------------------------------------------------------------------------
# Calendário de vencimentos
# ---------------------------------------------------------------------------

def due_events(properties: Sequence[Property]) -> List[DueEvent]:
    events: List[DueEvent] = []
    for prop in properties:
        for unit in prop.units:
            due = parse_date(unit.due_date)
            if due is None:
                continue
            events.append(
                DueEvent(
                    id=f"{prop.id}-{unit.sequential}-{unit.year}",
                    property_id=prop.id,
                    property_name=prop.name,
                    city=prop.city,
                    sequential=unit.sequential,
                    due_date=due,
                    value=effective_amount(unit),
                    status=IptuStatus.parse(unit.status),
                    year=unit.year,
                )
            )
    return events


def events_for_month(properties: Sequence[Property], year: int, month: int) -> List[DueEvent]:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month!r}")
    events = [e for e in due_events(properties) if e.due_date.year == year and e.due_date.month == month]
    return sorted(events, key=lambda e: e.due_date)
