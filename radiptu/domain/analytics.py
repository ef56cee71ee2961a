# radiptu/domain/analytics.py
"""
Agregações usadas igualmente pelo dashboard e pelos relatórios.

Tudo é recalculado sob demanda sobre a coleção completa de imóveis;
nenhuma divisão devolve NaN/infinito (total zero -> 0%).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from radiptu.domain.apportionment import effective_amount, year_liability
from radiptu.domain.models import IptuStatus, PaymentMethod, Property, PropertyType, PropertyUnit
from radiptu.domain.status import has_prior_debt, resolve_property_status, units_for_year
from radiptu.utils.parse_utils import normalize_city, safe_float, safe_int

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Comparativo ano a ano
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearOverYear:
    current: float
    previous: float
    diff: float
    pct: float


def year_over_year(current: Any, previous: Any) -> YearOverYear:
    cur = safe_float(current) or 0.0
    prev = safe_float(previous) or 0.0
    diff = cur - prev
    pct = diff / prev * 100.0 if prev > 0 else 0.0
    return YearOverYear(current=cur, previous=prev, diff=diff, pct=pct)


def property_year_over_year(prop: Property, year: int) -> YearOverYear:
    return year_over_year(year_liability(prop, year), year_liability(prop, year - 1))


# ---------------------------------------------------------------------------
# Recorte geográfico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeoBucket:
    key: str
    total: float
    properties: int


@dataclass(frozen=True)
class GeoRollup:
    cities: List[GeoBucket]
    states: List[GeoBucket]


def _rollup(pairs: Iterable[tuple]) -> List[GeoBucket]:
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for key, value in pairs:
        if key not in totals:
            totals[key] = 0.0
            counts[key] = 0
        totals[key] += value
        counts[key] += 1
    buckets = [GeoBucket(key=k, total=totals[k], properties=counts[k]) for k in totals]
    # sorted() é estável: empates mantêm a ordem de inserção
    return sorted(buckets, key=lambda b: b.total, reverse=True)


def geographic_rollup(properties: Sequence[Property], year: int) -> GeoRollup:
    liabilities = [(p, year_liability(p, year)) for p in properties]
    cities = _rollup((normalize_city(p.city), value) for p, value in liabilities)
    states = _rollup((str(p.state or "").strip().upper(), value) for p, value in liabilities)
    return GeoRollup(cities=cities, states=states)


# ---------------------------------------------------------------------------
# Distribuição por forma de pagamento / status
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bucket:
    label: str
    count: int
    percentage: float


@dataclass(frozen=True)
class Distribution:
    total: int
    methods: List[Bucket]
    statuses: List[Bucket]

    def method(self, method: PaymentMethod) -> Optional[Bucket]:
        """Só Cota Única e Parcelado têm bucket; Em aberto -> None."""
        return next((b for b in self.methods if b.label == method.value), None)

    def status(self, status: IptuStatus) -> Optional[Bucket]:
        return next((b for b in self.statuses if b.label == status.value), None)


def _pct(count: int, total: int) -> float:
    return count / total * 100.0 if total > 0 else 0.0


def distribution(properties: Sequence[Property], year: int) -> Distribution:
    units = [u for p in properties for u in units_for_year(p, year)]
    total = len(units)

    method_labels = (PaymentMethod.COTA_UNICA, PaymentMethod.PARCELADO)
    method_counts = {m: 0 for m in method_labels}
    status_counts = {s: 0 for s in IptuStatus}

    for unit in units:
        method = PaymentMethod.parse(unit.chosen_method)
        if method in method_counts:
            method_counts[method] += 1
        status_counts[IptuStatus.parse(unit.status)] += 1

    return Distribution(
        total=total,
        methods=[Bucket(m.value, c, _pct(c, total)) for m, c in method_counts.items()],
        statuses=[Bucket(s.value, c, _pct(c, total)) for s, c in status_counts.items()],
    )


# ---------------------------------------------------------------------------
# Maiores lançamentos do ano
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChargeHighlight:
    property_id: str
    property_name: str
    sequential: str
    value: float


@dataclass(frozen=True)
class HighestCharges:
    single: Optional[ChargeHighlight]
    installment: Optional[ChargeHighlight]


def highest_charges(properties: Sequence[Property], year: int) -> HighestCharges:
    best_single: Optional[ChargeHighlight] = None
    best_installment: Optional[ChargeHighlight] = None

    for prop in properties:
        for unit in units_for_year(prop, year):
            single = safe_float(unit.single_value) or 0.0
            installment = safe_float(unit.installment_value) or 0.0
            # estritamente maior: em empate fica o primeiro visto
            if single > 0 and (best_single is None or single > best_single.value):
                best_single = ChargeHighlight(prop.id, prop.name, unit.sequential, single)
            if installment > 0 and (best_installment is None or installment > best_installment.value):
                best_installment = ChargeHighlight(prop.id, prop.name, unit.sequential, installment)

    return HighestCharges(single=best_single, installment=best_installment)


# ---------------------------------------------------------------------------
# Resumo do dashboard
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PortfolioSummary:
    year: int
    total_properties: int
    total_liability: float
    total_paid: float
    total_open: float
    paid_properties: int
    regularization_pct: float
    properties_with_prior_debt: int
    status_counts: Dict[str, int] = field(default_factory=dict)


def portfolio_summary(properties: Sequence[Property], year: int) -> PortfolioSummary:
    total_liability = 0.0
    total_paid = 0.0
    paid_properties = 0
    with_debt = 0
    status_counts = {s.value: 0 for s in IptuStatus}

    for prop in properties:
        for unit in units_for_year(prop, year):
            amount = effective_amount(unit)
            total_liability += amount
            if IptuStatus.parse(unit.status) is IptuStatus.PAGO:
                total_paid += amount

        status = resolve_property_status(prop, year)
        status_counts[status.value] += 1
        if status is IptuStatus.PAGO:
            paid_properties += 1
        if has_prior_debt(prop, year):
            with_debt += 1

    summary = PortfolioSummary(
        year=year,
        total_properties=len(properties),
        total_liability=total_liability,
        total_paid=total_paid,
        total_open=total_liability - total_paid,
        paid_properties=paid_properties,
        regularization_pct=_pct(paid_properties, len(properties)),
        properties_with_prior_debt=with_debt,
        status_counts=status_counts,
    )
    logger.debug(
        "[ANALYTICS] resumo ano=%s imóveis=%d total=%.2f pago=%.2f",
        year,
        summary.total_properties,
        summary.total_liability,
        summary.total_paid,
    )
    return summary


def available_years(properties: Sequence[Property], current_year: int) -> List[int]:
    years = {current_year, current_year - 1}
    for prop in properties:
        for item in list(prop.units) + list(prop.iptu_history):
            year = safe_int(item.year)
            if year is not None:
                years.add(year)
    return sorted(years, reverse=True)


# ---------------------------------------------------------------------------
# Filtro da listagem de imóveis
# ---------------------------------------------------------------------------

def filter_properties(
    properties: Sequence[Property],
    search: str = "",
    property_type: Optional[PropertyType] = None,
    status: Optional[IptuStatus] = None,
    year: Optional[int] = None,
) -> List[Property]:
    """
    Busca por nome, endereço ou inscrição (sem diferenciar maiúsculas),
    com filtros opcionais de tipo e de status resolvido para `year`.
    """
    needle = (search or "").strip().lower()
    out: List[Property] = []

    for prop in properties:
        if needle and not (
            needle in (prop.name or "").lower()
            or needle in (prop.address or "").lower()
            or needle in (prop.registration_number or "").lower()
        ):
            continue
        if property_type is not None and PropertyType.parse(prop.type) is not property_type:
            continue
        if status is not None:
            if year is None:
                raise ValueError("status filter requires a year")
            if resolve_property_status(prop, year) is not status:
                continue
        out.append(prop)

    return out


def sequentials_for_year(prop: Property, year: int) -> List[PropertyUnit]:
    """Unidades do ano ordenadas por sequencial (exibição/relatórios)."""
    return sorted(units_for_year(prop, year), key=lambda u: str(u.sequential))
