"""
Resumo da carteira de IPTU no terminal.

    python -m radiptu.cli.portfolio_summary --year 2025
    python -m radiptu.cli.portfolio_summary --year 2025 --offline --alerts
    python -m radiptu.cli.portfolio_summary --year 2025 --report aberto
"""
import argparse
import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from radiptu.config.app_config import AppConfig
from radiptu.domain.alerts import build_alerts
from radiptu.domain.analytics import distribution, geographic_rollup, highest_charges, portfolio_summary
from radiptu.domain.apportionment import compute_apportionment
from radiptu.domain.models import Property
from radiptu.domain.status import has_prior_debt, resolve_property_status
from radiptu.services.property_service import PropertyService
from radiptu.services.reports import REPORT_SPECS, build_report
from radiptu.utils.audit import mask_email

logger = logging.getLogger(__name__)


def fmt_brl(value: float) -> str:
    s = f"{value:,.2f}"
    return "R$ " + s.replace(",", "X").replace(".", ",").replace("X", ".")


# ---------------------------
#  pretty-print
# ---------------------------

def print_summary(properties: List[Property], year: int) -> None:
    summary = portfolio_summary(properties, year)
    print("=" * 80)
    print(f"Carteira IPTU {year}: {summary.total_properties} imóveis")
    print("-" * 80)
    print(f"  Total lançado      : {fmt_brl(summary.total_liability)}")
    print(f"  Total pago         : {fmt_brl(summary.total_paid)}")
    print(f"  Em aberto          : {fmt_brl(summary.total_open)}")
    print(f"  Regularização      : {summary.regularization_pct:.1f}% ({summary.paid_properties} imóveis pagos)")
    print(f"  Com débitos antigos: {summary.properties_with_prior_debt}")
    for label, count in summary.status_counts.items():
        print(f"    {label:14}: {count}")

    dist = distribution(properties, year)
    print()
    print(f"  Sequenciais no ano: {dist.total}")
    for bucket in dist.methods:
        print(f"    {bucket.label:14}: {bucket.count} ({bucket.percentage:.1f}%)")

    top = highest_charges(properties, year)
    if top.single:
        print(f"  Maior cota única : {fmt_brl(top.single.value)} ({top.single.property_name} / {top.single.sequential})")
    if top.installment:
        print(
            f"  Maior parcelado  : {fmt_brl(top.installment.value)} "
            f"({top.installment.property_name} / {top.installment.sequential})"
        )

    geo = geographic_rollup(properties, year)
    if geo.cities:
        print()
        print("  Por cidade:")
        for bucket in geo.cities:
            print(f"    {bucket.key:24} {fmt_brl(bucket.total):>18}  ({bucket.properties} imóveis)")


def print_properties(properties: List[Property], year: int) -> None:
    print()
    print("=== Imóveis ===")
    for prop in properties:
        status = resolve_property_status(prop, year)
        badge = "  [DÉBITOS]" if has_prior_debt(prop, year) else ""
        print(f"  {prop.name:32} {prop.city:18} {status.value}{badge}")
        for row in compute_apportionment(prop, year):
            print(f"      - {row.name or row.tenant_id:28} {row.percentage:6.2f}%  {fmt_brl(row.amount)}")


def print_alerts(properties: List[Property], today: date, cfg: AppConfig) -> None:
    alerts = build_alerts(
        properties,
        today,
        warning_days=cfg.alerts.warning_days,
        countdown_days=cfg.alerts.countdown_days,
    )
    print()
    print(f"=== Alertas ({len(alerts)}) ===")
    if not alerts:
        print("  Nenhum vencimento próximo.")
    for alert in alerts:
        print(f"  [{alert.type}] {alert.title}: {alert.message}")


def print_audit_logs(service: PropertyService, limit: int) -> None:
    print()
    print(f"=== Últimas {limit} ações ===")
    for row in service.recent_audit_logs(limit):
        when = row["created_at"].strftime("%d/%m/%Y %H:%M") if row.get("created_at") else "-"
        who = f"{row.get('user_name') or 'Usuário'} ({mask_email(row.get('user_email') or '')})"
        print(f"  {when}  {who:36} {row['action']}: {row.get('details') or ''}")


def print_report(report_id: str, properties: List[Property], year: int) -> None:
    rows = build_report(report_id, properties, year)
    print()
    print(f"=== Relatório {report_id} ({len(rows)} linhas) ===")
    for row in rows:
        print("  " + " | ".join(f"{k}: {v}" for k, v in row.items()))


# ---------------------------
#  main
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Resumo da carteira de IPTU (banco, cache local ou seed).")
    parser.add_argument("--year", type=int, default=date.today().year, help="exercício de referência")
    parser.add_argument("--offline", action="store_true", help="não consulta o banco (cache -> seed)")
    parser.add_argument("--alerts", action="store_true", help="lista alertas de vencimento")
    parser.add_argument(
        "--report",
        choices=[s.id for s in REPORT_SPECS],
        help="imprime as linhas de um relatório",
    )
    parser.add_argument("--audit", type=int, metavar="N", help="lista as N últimas ações (requer banco)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = AppConfig.from_env()
    if args.offline:
        cfg = replace(cfg, offline=True)

    service = PropertyService.from_config(cfg)
    properties = service.fetch_properties()
    logger.info("[CLI] %d imóveis carregados (origem: %s)", len(properties), service.source)

    if not properties:
        print("Nenhum imóvel encontrado.")
        return 1

    print_summary(properties, args.year)
    print_properties(properties, args.year)
    if args.alerts:
        print_alerts(properties, date.today(), cfg)
    if args.report:
        print_report(args.report, properties, args.year)
    if args.audit:
        print_audit_logs(service, args.audit)
    print("=" * 80)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
