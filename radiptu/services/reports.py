"""
Linhas dos relatórios da carteira (uma lista de dicts por relatório).

Com `year` informado, os valores vêm das unidades do ano quando existem e
do histórico de IPTU caso contrário; sem `year`, todo o histórico é listado.
A exportação para planilha fica por conta de quem consome as linhas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from radiptu.domain.analytics import geographic_rollup, property_year_over_year, sequentials_for_year
from radiptu.domain.apportionment import effective_amount
from radiptu.domain.models import IptuStatus, PaymentMethod, Property
from radiptu.domain.status import as_year, resolve_property_status
from radiptu.utils.parse_utils import safe_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSpec:
    id: str
    category: str
    title: str
    description: str


REPORT_SPECS: List[ReportSpec] = [
    ReportSpec("fin_geral", "Financeiro", "Relatório Financeiro Geral", "Consolidado de valores totais, pagos e saldos."),
    ReportSpec("aberto", "Financeiro", "Valores em Aberto", "Listagem de débitos pendentes e vencimentos."),
    ReportSpec("pagos", "Financeiro", "Pagamentos Efetuados", "Histórico de quitações e formas de pagamento."),
    ReportSpec("sit_imovel", "Operacional", "Situação por Imóvel", "Raio-X individual de cada imóvel da carteira."),
    ReportSpec("status_dist", "Operacional", "IPTUs por Status", "Agrupamento dos imóveis por situação."),
    ReportSpec("comp_anual", "Gerencial", "Comparativo Anual", "Evolução do IPTU em relação ao ano anterior."),
    ReportSpec("impacto", "Gerencial", "Impacto Financeiro", "Economia gerada por pagamentos em cota única."),
    ReportSpec("geo", "Gerencial", "Distribuição Geográfica", "Total de IPTU por cidade e por estado."),
]


def get_report_spec(report_id: str) -> Optional[ReportSpec]:
    return next((s for s in REPORT_SPECS if s.id == report_id), None)


@dataclass(frozen=True)
class _Charge:
    year: Optional[int]
    value: float
    status: IptuStatus
    method: Optional[PaymentMethod]
    due_date: Optional[str]
    paid_on: Optional[str]


def _charges(prop: Property, year: Optional[int]) -> List[_Charge]:
    if year is not None:
        units = sequentials_for_year(prop, year)
        if units:
            return [
                _Charge(
                    year=year,
                    value=effective_amount(u),
                    status=IptuStatus.parse(u.status),
                    method=PaymentMethod.parse(u.chosen_method),
                    due_date=u.due_date,
                    paid_on=None,
                )
                for u in units
            ]

    out: List[_Charge] = []
    for rec in prop.iptu_history:
        rec_year = as_year(rec.year)
        if year is not None and rec_year != year:
            continue
        out.append(
            _Charge(
                year=rec_year,
                value=safe_float(rec.value) or 0.0,
                status=IptuStatus.parse(rec.status),
                method=PaymentMethod.parse(rec.chosen_method) if rec.chosen_method else None,
                due_date=rec.due_date,
                paid_on=rec.start_date,
            )
        )
    return out


def _current_status(prop: Property, year: Optional[int]) -> Optional[IptuStatus]:
    if year is not None:
        return resolve_property_status(prop, year)
    dated = [r for r in prop.iptu_history if as_year(r.year) is not None]
    if not dated:
        return None
    latest = max(dated, key=lambda r: as_year(r.year))
    return IptuStatus.parse(latest.status)


def _fin_geral(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    rows = []
    for prop in properties:
        for c in _charges(prop, year):
            paid = c.status is IptuStatus.PAGO
            rows.append(
                {
                    "ID Imóvel": prop.id[:8],
                    "Nome": prop.name,
                    "Inscrição": prop.registration_number,
                    "Ano": c.year,
                    "Valor Total": c.value,
                    "Valor Pago": c.value if paid else 0.0,
                    "Saldo Devedor": 0.0 if paid else c.value,
                    "Status": c.status.value,
                }
            )
    return rows


def _aberto(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    return [
        {
            "Imóvel": prop.name,
            "Ano": c.year,
            "Vencimento": c.due_date or "Pendente",
            "Valor Pendente": c.value,
            "Proprietário": prop.owner_name,
        }
        for prop in properties
        for c in _charges(prop, year)
        if c.status is not IptuStatus.PAGO
    ]


def _pagos(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    return [
        {
            "Imóvel": prop.name,
            "Ano": c.year,
            "Data Pagamento": c.paid_on or "N/A",
            "Valor": c.value,
            "Forma": c.method.value if c.method else "N/A",
        }
        for prop in properties
        for c in _charges(prop, year)
        if c.status is IptuStatus.PAGO
    ]


def _sit_imovel(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    rows = []
    for prop in properties:
        status = _current_status(prop, year)
        rows.append(
            {
                "Imóvel": prop.name,
                "Tipo": prop.type.value,
                "Cidade": prop.city,
                "Última Atualização": prop.last_updated,
                "Status Atual": status.value if status else "N/A",
            }
        )
    return rows


def _status_dist(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    total = len(properties)
    if total == 0:
        return []

    counts: Dict[str, int] = {}
    for prop in properties:
        status = _current_status(prop, year) or IptuStatus.PENDENTE
        counts[status.value] = counts.get(status.value, 0) + 1

    return [
        {"Status": label, "Quantidade": count, "Percentual": f"{count / total * 100:.1f}%"}
        for label, count in counts.items()
    ]


def _comp_anual(properties: Sequence[Property], year: int) -> List[Dict[str, Any]]:
    rows = []
    for prop in properties:
        yoy = property_year_over_year(prop, year)
        rows.append(
            {
                "Imóvel": prop.name,
                f"Valor {year - 1}": yoy.previous,
                f"Valor {year}": yoy.current,
                "Diferença": yoy.diff,
                "Variação (%)": round(yoy.pct, 1),
            }
        )
    return rows


def _impacto(properties: Sequence[Property], year: int) -> List[Dict[str, Any]]:
    rows = []
    for prop in properties:
        for unit in sequentials_for_year(prop, year):
            single = safe_float(unit.single_value) or 0.0
            installment = safe_float(unit.installment_value) or 0.0
            method = PaymentMethod.parse(unit.chosen_method)
            saving = installment - single if method is PaymentMethod.COTA_UNICA and installment > single > 0 else 0.0
            rows.append(
                {
                    "Imóvel": prop.name,
                    "Sequencial": unit.sequential,
                    "Forma": method.value,
                    "Valor Parcelado": installment,
                    "Cota Única": single,
                    "Economia": saving,
                }
            )
    return rows


def _geo(properties: Sequence[Property], year: int) -> List[Dict[str, Any]]:
    rollup = geographic_rollup(properties, year)
    rows = [{"Nível": "Cidade", "Local": b.key, "Imóveis": b.properties, "Total": b.total} for b in rollup.cities]
    rows += [{"Nível": "Estado", "Local": b.key, "Imóveis": b.properties, "Total": b.total} for b in rollup.states]
    return rows


def _general(properties: Sequence[Property], year: Optional[int]) -> List[Dict[str, Any]]:
    rows = []
    for prop in properties:
        status = _current_status(prop, year)
        rows.append(
            {
                "Nome": prop.name,
                "Inscrição": prop.registration_number,
                "Bairro": prop.neighborhood,
                "Cidade": prop.city,
                "Proprietário": prop.owner_name,
                "Tipo": prop.type.value,
                "Valor Avaliação": prop.appraisal_value,
                "Status Atual": status.value if status else "N/A",
            }
        )
    return rows


_BUILDERS: Dict[str, Callable[[Sequence[Property], Optional[int]], List[Dict[str, Any]]]] = {
    "fin_geral": _fin_geral,
    "aberto": _aberto,
    "pagos": _pagos,
    "sit_imovel": _sit_imovel,
    "status_dist": _status_dist,
}

# precisam de um ano de referência; sem ano usa o corrente
_YEAR_BUILDERS: Dict[str, Callable[[Sequence[Property], int], List[Dict[str, Any]]]] = {
    "comp_anual": _comp_anual,
    "impacto": _impacto,
    "geo": _geo,
}


def build_report(report_id: str, properties: Sequence[Property], year: Optional[int] = None) -> List[Dict[str, Any]]:
    if report_id in _YEAR_BUILDERS:
        rows = _YEAR_BUILDERS[report_id](properties, year if year is not None else date.today().year)
    elif report_id in _BUILDERS:
        rows = _BUILDERS[report_id](properties, year)
    else:
        logger.info("[REPORT] relatório %r sem layout próprio, usando listagem geral", report_id)
        rows = _general(properties, year)

    logger.debug("[REPORT] %s ano=%s -> %d linhas", report_id, year, len(rows))
    return rows
