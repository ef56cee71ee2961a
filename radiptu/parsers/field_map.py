"""
Mapeamento de chaves cruas para os campos do modelo.

As linhas chegam em formatos diferentes:
  - colunas da tabela `properties` (snake_case: zip_code, is_complex, ...);
  - blobs JSONB de units/tenants/iptu_history e o cache local (camelCase:
    singleValue, chosenMethod, ...);
  - YAML/CSV escritos à mão (qualquer capitalização).

Toda chave é normalizada para snake_case minúsculo e traduzida pelos mapas
abaixo. Chaves desconhecidas não são descartadas: vão para `extra`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Tuple

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def normalize_key(raw_key: Any) -> str:
    """'singleValue' -> 'single_value', 'ZIP_CODE' -> 'zip_code'."""
    key = _CAMEL_RE.sub(r"_\1", str(raw_key).strip())
    key = re.sub(r"[\s\-]+", "_", key)
    return key.lower()


PROPERTY_FIELDS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "address": "address",
    "neighborhood": "neighborhood",
    "city": "city",
    "state": "state",
    "zip_code": "zip_code",
    "zipcode": "zip_code",
    "cep": "zip_code",
    "owner_name": "owner_name",
    "registry_owner": "registry_owner",
    "possession": "possession",
    "type": "type",
    "is_complex": "is_complex",
    "registration_number": "registration_number",
    "sequential": "sequential",
    "land_area": "land_area",
    "built_area": "built_area",
    "appraisal_value": "appraisal_value",
    "base_year": "base_year",
    "last_updated": "last_updated",
    "image_url": "image_url",
    "units": "units",
    "tenants": "tenants",
    "iptu_history": "iptu_history",
}

UNIT_FIELDS: Dict[str, str] = {
    "sequential": "sequential",
    "sequencial": "sequential",
    "year": "year",
    "single_value": "single_value",
    "installment_value": "installment_value",
    "installments_count": "installments_count",
    "chosen_method": "chosen_method",
    "status": "status",
    "registration_number": "registration_number",
    "address": "address",
    "owner_name": "owner_name",
    "registry_owner": "registry_owner",
    "land_area": "land_area",
    "built_area": "built_area",
    "due_date": "due_date",
    "has_waste_tax": "has_waste_tax",
    "waste_tax_value": "waste_tax_value",
    "iptu_not_available": "iptu_not_available",
}

TENANT_FIELDS: Dict[str, str] = {
    "id": "id",
    "year": "year",
    "name": "name",
    "occupied_area": "occupied_area",
    "is_single_tenant": "is_single_tenant",
    "manual_percentage": "manual_percentage",
    "selected_sequential": "selected_sequential",
    "contract_start": "contract_start",
    "contract_end": "contract_end",
}

RECORD_FIELDS: Dict[str, str] = {
    "id": "id",
    "year": "year",
    "value": "value",
    "status": "status",
    "single_value": "single_value",
    "installment_value": "installment_value",
    "installments_count": "installments_count",
    "chosen_method": "chosen_method",
    "holmes_company": "holmes_company",
    "start_date": "start_date",
    "due_date": "due_date",
    "selected_sequentials": "selected_sequentials",
    "receipt_url": "receipt_url",
    "iptu_not_available": "iptu_not_available",
}


def map_fields(raw: Mapping[str, Any], fields: Mapping[str, str]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Traduz as chaves de `raw` pelo mapa `fields`.

    Devolve (mapped, extra): campos conhecidos e o resto intacto.
    """
    mapped: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}

    for raw_key, value in raw.items():
        if raw_key is None:
            continue
        target = fields.get(normalize_key(raw_key))
        if target:
            mapped[target] = value
        else:
            extra[raw_key] = value

    if extra:
        logger.debug("map_fields: chaves desconhecidas em extra: %s", list(extra.keys()))

    return mapped, extra
