import pytest

from radiptu.domain.models import IptuRecord, IptuStatus, PaymentMethod, Property, PropertyType, PropertyUnit
from radiptu.services.reports import REPORT_SPECS, build_report, get_report_spec


@pytest.fixture
def portfolio():
    return [
        Property(
            id="abcdef123456",
            name="Horizon",
            city="São Paulo",
            state="SP",
            owner_name="Ricardo",
            registration_number="123",
            type=PropertyType.APARTAMENTO,
            units=[
                PropertyUnit(sequential="B", year=2025, single_value=1000, installment_value=1200,
                             chosen_method=PaymentMethod.COTA_UNICA, status=IptuStatus.PAGO),
                PropertyUnit(sequential="A", year=2025, single_value=500, installment_value=600,
                             chosen_method=PaymentMethod.PARCELADO, status=IptuStatus.EM_ABERTO,
                             due_date="10/04/2025"),
                PropertyUnit(sequential="A", year=2024, single_value=1500, status=IptuStatus.PAGO),
            ],
            iptu_history=[
                IptuRecord(id="h1", year=2024, value=1500, status=IptuStatus.PAGO, start_date="01/02/2024"),
                IptuRecord(id="h0", year=2023, value=1400, status=IptuStatus.PENDENTE),
            ],
        ),
        Property(
            id="p2",
            name="Galpão",
            city="Recife",
            state="PE",
            type=PropertyType.GALPAO,
            iptu_history=[IptuRecord(id="g1", year=2025, value=800, status=IptuStatus.PENDENTE, due_date="20/04/2025")],
        ),
    ]


def test_report_catalog_ids_are_unique():
    ids = [s.id for s in REPORT_SPECS]
    assert len(ids) == len(set(ids))
    assert get_report_spec("geo").category == "Gerencial"
    assert get_report_spec("nope") is None


def test_fin_geral_uses_units_then_history(portfolio):
    rows = build_report("fin_geral", portfolio, 2025)
    assert [(r["ID Imóvel"], r["Valor Total"], r["Valor Pago"], r["Saldo Devedor"]) for r in rows] == [
        ("abcdef12", 600, 0.0, 600),
        ("abcdef12", 1000, 1000, 0.0),
        ("p2", 800, 0.0, 800),
    ]


def test_fin_geral_without_year_lists_history(portfolio):
    rows = build_report("fin_geral", portfolio)
    assert [(r["Nome"], r["Ano"]) for r in rows] == [("Horizon", 2024), ("Horizon", 2023), ("Galpão", 2025)]


def test_aberto_and_pagos(portfolio):
    aberto = build_report("aberto", portfolio, 2025)
    assert [(r["Imóvel"], r["Vencimento"], r["Valor Pendente"]) for r in aberto] == [
        ("Horizon", "10/04/2025", 600),
        ("Galpão", "20/04/2025", 800),
    ]
    pagos = build_report("pagos", portfolio)
    assert pagos == [{"Imóvel": "Horizon", "Ano": 2024, "Data Pagamento": "01/02/2024", "Valor": 1500, "Forma": "Cota Única"}]


def test_status_dist(portfolio):
    rows = build_report("status_dist", portfolio, 2025)
    assert {r["Status"]: r["Percentual"] for r in rows} == {"Em aberto": "50.0%", "Pendente": "50.0%"}
    assert build_report("status_dist", [], 2025) == []


def test_sit_imovel_without_year_uses_latest_history(portfolio):
    rows = build_report("sit_imovel", portfolio)
    assert [r["Status Atual"] for r in rows] == ["Pago", "Pendente"]


def test_comp_anual(portfolio):
    rows = build_report("comp_anual", portfolio, 2025)
    assert rows[0]["Valor 2024"] == 1500
    assert rows[0]["Valor 2025"] == 1600
    assert rows[0]["Variação (%)"] == pytest.approx(6.7)
    assert rows[1]["Variação (%)"] == 0


def test_impacto_counts_savings_only_for_single_payment(portfolio):
    rows = build_report("impacto", portfolio, 2025)
    assert [(r["Sequencial"], r["Economia"]) for r in rows] == [("A", 0.0), ("B", 200)]


def test_geo(portfolio):
    rows = build_report("geo", portfolio, 2025)
    assert rows[0] == {"Nível": "Cidade", "Local": "São Paulo", "Imóveis": 1, "Total": 1600}
    assert [r["Local"] for r in rows if r["Nível"] == "Estado"] == ["SP", "PE"]


def test_unknown_report_falls_back_to_listing(portfolio):
    rows = build_report("auditoria", portfolio, 2025)
    assert [r["Nome"] for r in rows] == ["Horizon", "Galpão"]
    assert rows[0]["Status Atual"] == "Em aberto"
