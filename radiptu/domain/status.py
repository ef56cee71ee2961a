# radiptu/domain/status.py
"""
Status anual do imóvel e débitos de exercícios anteriores.

A ordem de prioridade do status agregado é fixa e a UI depende dela:

    todos Pago  ->  Pago
    algum Em andamento  ->  Em andamento   (mesmo com unidades Em aberto)
    algum Em aberto     ->  Em aberto
    resto               ->  Pendente
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Set

from radiptu.domain.models import IptuStatus, Property, PropertyUnit
from radiptu.utils.parse_utils import safe_float, safe_int

logger = logging.getLogger(__name__)


def as_year(value: Any) -> Optional[int]:
    """Ano legado pode chegar como string; não numérico -> None."""
    return safe_int(value)


def units_for_year(prop: Property, year: Any) -> List[PropertyUnit]:
    target = as_year(year)
    if target is None:
        return []
    return [u for u in prop.units if as_year(u.year) == target]


def resolve_property_status(prop: Property, year: Any) -> IptuStatus:
    units = units_for_year(prop, year)
    if not units:
        return IptuStatus.PENDENTE

    statuses = [IptuStatus.parse(u.status) for u in units]

    if all(s is IptuStatus.PAGO for s in statuses):
        return IptuStatus.PAGO
    if any(s is IptuStatus.EM_ANDAMENTO for s in statuses):
        return IptuStatus.EM_ANDAMENTO
    if any(s is IptuStatus.EM_ABERTO for s in statuses):
        return IptuStatus.EM_ABERTO
    return IptuStatus.PENDENTE


def _has_amount(unit: PropertyUnit) -> bool:
    single = safe_float(unit.single_value) or 0.0
    installment = safe_float(unit.installment_value) or 0.0
    return single > 0 or installment > 0


def has_prior_debt(prop: Property, reference_year: Any) -> bool:
    """
    Badge "DÉBITOS": existe cobrança não paga em ano anterior a reference_year?

    1) units com ano < reference_year, status != Pago e valor > 0;
    2) fallback em iptu_history, só para anos sem nenhuma unit
       (o histórico desses anos já foi substituído pelos sequenciais).
    """
    ref = as_year(reference_year)
    if ref is None:
        return False

    unit_years: Set[int] = set()
    for unit in prop.units:
        year = as_year(unit.year)
        if year is None or year >= ref:
            continue
        unit_years.add(year)
        if IptuStatus.parse(unit.status) is not IptuStatus.PAGO and _has_amount(unit):
            logger.debug(
                "[STATUS] débito anterior: imóvel=%s sequencial=%s ano=%s",
                prop.id,
                unit.sequential,
                year,
            )
            return True

    for record in prop.iptu_history:
        year = as_year(record.year)
        if year is None or year >= ref or year in unit_years:
            continue
        if IptuStatus.parse(record.status) is not IptuStatus.PAGO:
            logger.debug("[STATUS] débito anterior (histórico): imóvel=%s ano=%s", prop.id, year)
            return True

    return False
