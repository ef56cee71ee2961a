"""
Fronteira de entrada de dados: linha crua -> modelo tipado.

Tudo que é numérico passa por coerção aqui (anos em string, valores com
vírgula, campos ausentes), para que o núcleo de regras receba tipos estritos.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Mapping

from radiptu.domain.models import (
    IptuRecord,
    IptuStatus,
    PaymentMethod,
    Possession,
    Property,
    PropertyType,
    PropertyUnit,
    Tenant,
)
from radiptu.parsers.field_map import (
    PROPERTY_FIELDS,
    RECORD_FIELDS,
    TENANT_FIELDS,
    UNIT_FIELDS,
    map_fields,
)
from radiptu.utils.parse_utils import (
    clean_str,
    prepare_for_json,
    safe_float,
    safe_int,
    to_bool,
    to_float,
    to_installments,
)

logger = logging.getLogger(__name__)


def _str(v: Any) -> str:
    return clean_str(v) or ""


def parse_unit(raw: Mapping[str, Any]) -> PropertyUnit:
    data, _ = map_fields(raw, UNIT_FIELDS)

    year = safe_int(data.get("year"))
    if year is None:
        raise ValueError(f"unit without a numeric year: {dict(raw)!r}")

    return PropertyUnit(
        sequential=_str(data.get("sequential")),
        year=year,
        single_value=to_float(data.get("single_value")),
        installment_value=to_float(data.get("installment_value")),
        installments_count=to_installments(data.get("installments_count")),
        chosen_method=PaymentMethod.parse(data.get("chosen_method")),
        # sequencial novo nasce "Em aberto" (padrão do formulário)
        status=IptuStatus.parse(data.get("status")) if clean_str(data.get("status")) else IptuStatus.EM_ABERTO,
        registration_number=clean_str(data.get("registration_number")),
        address=clean_str(data.get("address")),
        owner_name=clean_str(data.get("owner_name")),
        registry_owner=clean_str(data.get("registry_owner")),
        land_area=safe_float(data.get("land_area")),
        built_area=safe_float(data.get("built_area")),
        due_date=clean_str(data.get("due_date")),
        has_waste_tax=to_bool(data.get("has_waste_tax")),
        waste_tax_value=to_float(data.get("waste_tax_value")),
        iptu_not_available=to_bool(data.get("iptu_not_available")),
    )


def parse_tenant(raw: Mapping[str, Any]) -> Tenant:
    data, _ = map_fields(raw, TENANT_FIELDS)

    tenant_id = clean_str(data.get("id"))
    if not tenant_id:
        raise ValueError("tenant id is required")
    year = safe_int(data.get("year"))
    if year is None:
        raise ValueError(f"tenant {tenant_id!r} without a numeric year")

    return Tenant(
        id=tenant_id,
        year=year,
        name=_str(data.get("name")),
        occupied_area=to_float(data.get("occupied_area")),
        is_single_tenant=to_bool(data.get("is_single_tenant")),
        manual_percentage=safe_float(data.get("manual_percentage")),
        selected_sequential=clean_str(data.get("selected_sequential")),
        contract_start=clean_str(data.get("contract_start")),
        contract_end=clean_str(data.get("contract_end")),
    )


def parse_iptu_record(raw: Mapping[str, Any]) -> IptuRecord:
    data, _ = map_fields(raw, RECORD_FIELDS)

    record_id = clean_str(data.get("id"))
    if not record_id:
        raise ValueError("iptu record id is required")
    year = safe_int(data.get("year"))
    if year is None:
        raise ValueError(f"iptu record {record_id!r} without a numeric year")

    sequentials = data.get("selected_sequentials") or []
    if isinstance(sequentials, str):
        sequentials = [s for s in (x.strip() for x in sequentials.split(",")) if s]

    return IptuRecord(
        id=record_id,
        year=year,
        value=to_float(data.get("value")),
        status=IptuStatus.parse(data.get("status")),
        single_value=to_float(data.get("single_value")),
        installment_value=to_float(data.get("installment_value")),
        installments_count=to_installments(data.get("installments_count")),
        chosen_method=PaymentMethod.parse(data.get("chosen_method")),
        holmes_company=clean_str(data.get("holmes_company")),
        start_date=clean_str(data.get("start_date")),
        due_date=clean_str(data.get("due_date")),
        selected_sequentials=[str(s).strip() for s in sequentials if clean_str(s)],
        receipt_url=clean_str(data.get("receipt_url")),
        iptu_not_available=to_bool(data.get("iptu_not_available")),
    )


def _parse_many(rows: Any, parser, what: str, property_id: str) -> List[Any]:
    out: List[Any] = []
    if not isinstance(rows, list):
        if rows:
            logger.warning("[PARSER] %s de %s não é lista: %r", what, property_id, type(rows))
        return out
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        try:
            out.append(parser(row))
        except ValueError as exc:
            logger.warning("[PARSER] %s ignorado em %s: %s", what, property_id, exc)
    return out


def parse_property(raw: Mapping[str, Any]) -> Property:
    data, _ = map_fields(raw, PROPERTY_FIELDS)

    property_id = clean_str(data.get("id"))
    if not property_id:
        raise ValueError("property id is required")

    return Property(
        id=property_id,
        name=_str(data.get("name")),
        address=_str(data.get("address")),
        neighborhood=_str(data.get("neighborhood")),
        city=_str(data.get("city")),
        state=_str(data.get("state")).upper(),
        zip_code=_str(data.get("zip_code")),
        owner_name=_str(data.get("owner_name")),
        registry_owner=_str(data.get("registry_owner")),
        possession=Possession.parse(data.get("possession")),
        type=PropertyType.parse(data.get("type")),
        is_complex=to_bool(data.get("is_complex")),
        registration_number=_str(data.get("registration_number")),
        sequential=_str(data.get("sequential")),
        land_area=to_float(data.get("land_area")),
        built_area=to_float(data.get("built_area")),
        appraisal_value=to_float(data.get("appraisal_value")),
        base_year=safe_int(data.get("base_year")),
        last_updated=_str(data.get("last_updated")),
        image_url=_str(data.get("image_url")),
        units=_parse_many(data.get("units"), parse_unit, "unit", property_id),
        tenants=_parse_many(data.get("tenants"), parse_tenant, "tenant", property_id),
        iptu_history=_parse_many(data.get("iptu_history"), parse_iptu_record, "iptu_history", property_id),
    )


def parse_properties(rows: Iterable[Mapping[str, Any]]) -> List[Property]:
    """Lote: linhas inválidas são registradas no log e ignoradas."""
    out: List[Property] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        try:
            out.append(parse_property(row))
        except ValueError as exc:
            logger.warning("[PARSER] Imóvel ignorado: %s", exc)
    return out


# ---------------------------------------------------------------------------
# Modelo -> JSON (camelCase, mesmo formato dos blobs JSONB e do cache local)
# ---------------------------------------------------------------------------

def _camel(key: str) -> str:
    head, *tail = key.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in tail)


def to_json_dict(obj: Any) -> Dict[str, Any]:
    """Dataclass do modelo -> dict camelCase sem campos None."""
    out: Dict[str, Any] = {}
    for key, value in prepare_for_json(asdict(obj)).items():
        if value is None:
            continue
        if isinstance(value, list):
            value = [_camel_keys(v) if isinstance(v, dict) else v for v in value]
        out[_camel(key)] = value
    return out


def _camel_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    return {_camel(k): v for k, v in d.items() if v is not None}


def property_to_row(prop: Property) -> Dict[str, Any]:
    """Property -> colunas da tabela `properties` (coleções em camelCase)."""
    return {
        "id": prop.id,
        "name": prop.name,
        "address": prop.address,
        "neighborhood": prop.neighborhood,
        "city": prop.city,
        "state": prop.state,
        "zip_code": prop.zip_code,
        "owner_name": prop.owner_name,
        "registry_owner": prop.registry_owner,
        "possession": prop.possession.value,
        "type": prop.type.value,
        "is_complex": prop.is_complex,
        "registration_number": prop.registration_number,
        "sequential": prop.sequential,
        "land_area": prop.land_area,
        "built_area": prop.built_area,
        "appraisal_value": prop.appraisal_value,
        "base_year": prop.base_year,
        "last_updated": prop.last_updated,
        "image_url": prop.image_url,
        "units": [to_json_dict(u) for u in prop.units],
        "tenants": [to_json_dict(t) for t in prop.tenants],
        "iptu_history": [to_json_dict(h) for h in prop.iptu_history],
    }
