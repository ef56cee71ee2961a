# radiptu/parsers/csv_import.py
"""
Importação da planilha de sequenciais (CSV separado por ';').

Colunas esperadas (cabeçalho da prefeitura / planilha interna):

    sequencial; incrição; Endereco do Sequencial; Proprietário atual;
    Proprietário Cadastro Imobiliário; Locatário;
    Cota única <ANO>; Valor Parcelado <ANO>; Parcelas <ANO>; Forma Pagamento <ANO>

Para cada linha e cada ano pedido gera um PropertyUnit "Em aberto" e, se
houver locatário, um Tenant vinculado ao sequencial.
"""

from __future__ import annotations

import csv
import io
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from radiptu.domain.models import IptuStatus, PaymentMethod, PropertyUnit, Tenant
from radiptu.parsers.field_map import normalize_key
from radiptu.utils.parse_utils import clean_str, to_float, to_installments

logger = logging.getLogger(__name__)


@dataclass
class CsvImportResult:
    units: List[PropertyUnit] = field(default_factory=list)
    tenants: List[Tenant] = field(default_factory=list)
    skipped_rows: int = 0


def _column(row: Dict[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = row.get(normalize_key(name))
        if clean_str(value):
            return clean_str(value)
    return None


def _method(raw: Optional[str]) -> PaymentMethod:
    return PaymentMethod.COTA_UNICA if (raw or "").strip().upper() == "COTA ÚNICA" else PaymentMethod.PARCELADO


def import_sequentials(text: str, years: Iterable[int], delimiter: str = ";") -> CsvImportResult:
    result = CsvImportResult()
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff").strip()), delimiter=delimiter)
    years = list(years)

    for line_no, raw in enumerate(reader, start=2):
        row = {normalize_key(k): (v or "").strip() for k, v in raw.items() if k is not None}

        sequential = _column(row, "sequencial", "sequential")
        if not sequential:
            result.skipped_rows += 1
            logger.warning("[IMPORT] linha %d sem sequencial, ignorada", line_no)
            continue

        registration = _column(row, "incrição", "inscrição", "inscricao")
        address = _column(row, "Endereco do Sequencial")
        owner = _column(row, "Proprietário atual")
        registry_owner = _column(row, "Proprietário Cadastro Imobiliário")
        tenant_name = _column(row, "Locatário")

        for year in years:
            result.units.append(
                PropertyUnit(
                    sequential=sequential,
                    year=year,
                    registration_number=registration,
                    address=address,
                    owner_name=owner,
                    registry_owner=registry_owner,
                    single_value=to_float(_column(row, f"COTA ÚNICA {year}", f"Cota única {year}")),
                    installment_value=to_float(_column(row, f"PARCELADO {year}", f"Valor Parcelado {year}")),
                    installments_count=to_installments(_column(row, f"Parcelas {year}")),
                    chosen_method=_method(_column(row, f"Forma Pagamento {year}")),
                    status=IptuStatus.EM_ABERTO,
                )
            )
            if tenant_name:
                result.tenants.append(
                    Tenant(
                        id=str(uuid.uuid4()),
                        name=tenant_name,
                        year=year,
                        occupied_area=0.0,
                        selected_sequential=sequential,
                    )
                )

    logger.info(
        "[IMPORT] %d sequenciais, %d locatários, %d linhas ignoradas",
        len(result.units),
        len(result.tenants),
        result.skipped_rows,
    )
    return result


def import_sequentials_file(path: Path, years: Iterable[int], delimiter: str = ";") -> CsvImportResult:
    with Path(path).open("r", encoding="utf-8-sig") as f:
        return import_sequentials(f.read(), years, delimiter=delimiter)
