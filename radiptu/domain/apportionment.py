# radiptu/domain/apportionment.py
"""
Rateio do IPTU anual entre locatários.

Três regimes, nesta ordem:
  A) locatário único  -> 100% para ele, 0% para os demais do ano;
  B) percentual manual -> manual_percentage% do total, SEM normalizar
     (a soma pode passar de 100%, comportamento aceito da aplicação);
  C) por área ocupada -> occupied_area / área total.
"""

from __future__ import annotations

from typing import Any, List

from radiptu.domain.models import ApportionmentRow, PaymentMethod, Property, PropertyUnit, Tenant
from radiptu.domain.status import as_year, units_for_year
from radiptu.utils.parse_utils import safe_float


def effective_amount(unit: PropertyUnit) -> float:
    """Valor que vale para o sequencial: parcelado se escolhido, senão cota única."""
    if PaymentMethod.parse(unit.chosen_method) is PaymentMethod.PARCELADO:
        return safe_float(unit.installment_value) or 0.0
    return safe_float(unit.single_value) or 0.0


def year_liability(prop: Property, year: Any) -> float:
    return sum(effective_amount(u) for u in units_for_year(prop, year))


def tenants_for_year(prop: Property, year: Any) -> List[Tenant]:
    target = as_year(year)
    if target is None:
        return []
    return [t for t in prop.tenants if as_year(t.year) == target]


def compute_apportionment(prop: Property, year: Any) -> List[ApportionmentRow]:
    tenants = tenants_for_year(prop, year)
    if not tenants:
        return []

    total = year_liability(prop, year)

    single = next((t for t in tenants if t.is_single_tenant), None)
    if single is not None:
        return [
            ApportionmentRow(
                tenant_id=t.id,
                name=t.name,
                percentage=100.0 if t is single else 0.0,
                amount=total if t is single else 0.0,
            )
            for t in tenants
        ]

    if any(t.manual_percentage is not None for t in tenants):
        rows = []
        for t in tenants:
            pct = safe_float(t.manual_percentage) or 0.0
            rows.append(ApportionmentRow(t.id, t.name, pct, pct / 100.0 * total))
        return rows

    areas = [max(safe_float(t.occupied_area) or 0.0, 0.0) for t in tenants]
    total_area = sum(areas)

    rows = []
    for t, area in zip(tenants, areas):
        pct = area / total_area * 100.0 if total_area > 0 else 0.0
        rows.append(ApportionmentRow(t.id, t.name, pct, pct / 100.0 * total))
    return rows
