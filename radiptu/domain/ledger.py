# radiptu/domain/ledger.py
"""
Operações de edição dos lançamentos de um imóvel.

Cada função recebe um Property e devolve um NOVO Property (a entrada não é
alterada). Quem chama persiste o resultado inteiro (full-row replace).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

from radiptu.domain.models import (
    IptuRecord,
    IptuStatus,
    PaymentMethod,
    Property,
    PropertyUnit,
    Tenant,
)
from radiptu.domain.status import as_year
from radiptu.utils.parse_utils import format_br_date

logger = logging.getLogger(__name__)

DEFAULT_NEW_CHARGE_INSTALLMENTS = 10


def _touch(prop: Property, today: Optional[date]) -> str:
    return format_br_date(today) if today else prop.last_updated


# ---------------------------------------------------------------------------
# Lançamentos (iptu_history) + sincronização dos sequenciais
# ---------------------------------------------------------------------------

def used_sequentials(prop: Property, year: int, exclude_record_id: Optional[str] = None) -> List[str]:
    """Sequenciais já cobertos por outros lançamentos do mesmo ano."""
    used: List[str] = []
    for record in prop.iptu_history:
        if as_year(record.year) != year or record.id == exclude_record_id:
            continue
        for seq in record.selected_sequentials:
            if seq not in used:
                used.append(seq)
    return used


def _unit_from_record(prop: Property, record: IptuRecord, sequential: str) -> PropertyUnit:
    previous = next((u for u in prop.units if u.sequential == sequential), None)

    return PropertyUnit(
        sequential=sequential,
        year=record.year,
        status=record.status,
        chosen_method=record.chosen_method,
        single_value=record.single_value,
        installment_value=record.installment_value,
        installments_count=record.installments_count or 1,
        iptu_not_available=record.iptu_not_available,
        address=(previous.address if previous else None) or prop.address,
        registration_number=(previous.registration_number if previous else None) or prop.registration_number,
        owner_name=(previous.owner_name if previous else None) or prop.owner_name,
        registry_owner=(previous.registry_owner if previous else None) or prop.registry_owner,
        land_area=(previous.land_area if previous else None) or (0.0 if prop.is_complex else prop.land_area),
        built_area=(previous.built_area if previous else None) or (0.0 if prop.is_complex else prop.built_area),
        has_waste_tax=previous.has_waste_tax if previous else False,
        waste_tax_value=previous.waste_tax_value if previous else 0.0,
    )


def upsert_iptu_record(prop: Property, record: IptuRecord, today: Optional[date] = None) -> Property:
    history = list(prop.iptu_history)
    index = next((i for i, h in enumerate(history) if h.id == record.id), None)
    if index is not None:
        history[index] = record
    else:
        history = sorted([record] + history, key=lambda h: as_year(h.year) or 0, reverse=True)

    units = list(prop.units)
    for seq in record.selected_sequentials:
        pos = next(
            (i for i, u in enumerate(units) if u.sequential == seq and as_year(u.year) == record.year),
            None,
        )
        if pos is not None:
            units[pos] = replace(
                units[pos],
                status=record.status,
                chosen_method=record.chosen_method,
                single_value=record.single_value,
                installment_value=record.installment_value,
                installments_count=record.installments_count or 1,
                iptu_not_available=record.iptu_not_available,
            )
        else:
            units.append(_unit_from_record(prop, record, seq))

    logger.debug(
        "[LEDGER] lançamento %s ano=%s sequenciais=%s imóvel=%s",
        record.id,
        record.year,
        record.selected_sequentials,
        prop.id,
    )
    return replace(prop, iptu_history=history, units=units, last_updated=_touch(prop, today))


def delete_iptu_record(prop: Property, record_id: str) -> Property:
    return replace(prop, iptu_history=[h for h in prop.iptu_history if h.id != record_id])


# ---------------------------------------------------------------------------
# Sequenciais
# ---------------------------------------------------------------------------

def upsert_unit(prop: Property, unit: PropertyUnit, today: Optional[date] = None) -> Property:
    units = list(prop.units)
    pos = next(
        (i for i, u in enumerate(units) if u.sequential == unit.sequential and as_year(u.year) == as_year(unit.year)),
        None,
    )
    if pos is not None:
        units[pos] = unit
    else:
        units.insert(0, unit)
    return replace(prop, units=units, last_updated=_touch(prop, today))


def delete_unit(
    prop: Property,
    sequential: str,
    year: int,
    registration_number: Optional[str] = None,
    today: Optional[date] = None,
) -> Property:
    units = [
        u
        for u in prop.units
        if not (
            u.sequential == sequential
            and as_year(u.year) == year
            and (u.registration_number or None) == (registration_number or None)
        )
    ]
    return replace(prop, units=units, last_updated=_touch(prop, today))


def start_new_charge(prop: Property, year: int) -> Property:
    """
    Abre o exercício `year`: para cada sequencial, copia a versão mais recente
    com valores zerados, Cota Única e status Em aberto.
    """
    latest: Dict[str, PropertyUnit] = {}
    for unit in sorted(prop.units, key=lambda u: as_year(u.year) or 0, reverse=True):
        latest.setdefault(unit.sequential, unit)

    existing = {u.sequential for u in prop.units if as_year(u.year) == year}
    new_units = [
        replace(
            unit,
            year=year,
            single_value=0.0,
            installment_value=0.0,
            installments_count=unit.installments_count or DEFAULT_NEW_CHARGE_INSTALLMENTS,
            chosen_method=PaymentMethod.COTA_UNICA,
            status=IptuStatus.EM_ABERTO,
            due_date=None,
            iptu_not_available=False,
        )
        for seq, unit in latest.items()
        if seq not in existing
    ]

    if not new_units:
        return replace(prop, base_year=year)

    logger.info("[LEDGER] novo exercício %s: %d sequenciais para imóvel=%s", year, len(new_units), prop.id)
    return replace(prop, units=new_units + list(prop.units), base_year=year)


# ---------------------------------------------------------------------------
# Locatários
# ---------------------------------------------------------------------------

def _clear_single_siblings(tenants: List[Tenant], keep: Tenant) -> List[Tenant]:
    return [
        replace(t, is_single_tenant=False)
        if t.id != keep.id and t.is_single_tenant and as_year(t.year) == as_year(keep.year)
        else t
        for t in tenants
    ]


def upsert_tenant(prop: Property, tenant: Tenant) -> Property:
    tenants = list(prop.tenants)
    pos = next((i for i, t in enumerate(tenants) if t.id == tenant.id), None)
    if pos is not None:
        tenants[pos] = tenant
    else:
        tenants.insert(0, tenant)

    if tenant.is_single_tenant:
        tenants = _clear_single_siblings(tenants, tenant)

    return replace(prop, tenants=tenants)


def remove_tenant(prop: Property, tenant_id: str) -> Property:
    return replace(prop, tenants=[t for t in prop.tenants if t.id != tenant_id])


def link_tenant_to_sequential(prop: Property, tenant_id: str, sequential: str) -> Property:
    """
    Vincula o locatário a um sequencial do mesmo ano e usa a área do terreno
    (ou construída) do sequencial como área ocupada para o rateio.
    """
    tenant = next((t for t in prop.tenants if t.id == tenant_id), None)
    if tenant is None:
        raise KeyError(f"Tenant {tenant_id!r} not found in property {prop.id!r}")

    unit = next(
        (u for u in prop.units if u.sequential == sequential and as_year(u.year) == as_year(tenant.year)),
        None,
    )
    updated = replace(tenant, selected_sequential=sequential)
    if unit is not None:
        updated = replace(updated, occupied_area=unit.land_area or unit.built_area or 0.0)

    return upsert_tenant(prop, updated)
