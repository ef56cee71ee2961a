import pytest

from radiptu.domain.models import IptuStatus, PaymentMethod, Possession, PropertyType
from radiptu.parsers.field_map import map_fields, normalize_key, UNIT_FIELDS
from radiptu.parsers.property_parser import (
    parse_iptu_record,
    parse_properties,
    parse_property,
    parse_tenant,
    parse_unit,
    property_to_row,
    to_json_dict,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("singleValue", "single_value"),
        ("iptuHistory", "iptu_history"),
        ("ZIP_CODE", "zip_code"),
        ("Forma Pagamento 2024", "forma_pagamento_2024"),
        ("is-complex", "is_complex"),
    ],
)
def test_normalize_key(raw, expected):
    assert normalize_key(raw) == expected


def test_map_fields_keeps_unknown_keys_in_extra():
    mapped, extra = map_fields({"sequencial": "A", "year": 2024, "foo": 1}, UNIT_FIELDS)
    assert mapped == {"sequential": "A", "year": 2024}
    assert extra == {"foo": 1}


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Pago", IptuStatus.PAGO),
        ("PAGO", IptuStatus.PAGO),
        ("Aberto", IptuStatus.EM_ABERTO),
        ("Em análise", IptuStatus.EM_ANDAMENTO),
        ("Lançado", IptuStatus.EM_ANDAMENTO),
        ("Indefinido", IptuStatus.PENDENTE),
        (None, IptuStatus.PENDENTE),
        ("qualquer coisa", IptuStatus.PENDENTE),
    ],
)
def test_status_labels(label, expected):
    assert IptuStatus.parse(label) is expected


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Cota Única", PaymentMethod.COTA_UNICA),
        ("cota unica", PaymentMethod.COTA_UNICA),
        ("Parcelado", PaymentMethod.PARCELADO),
        ("Indefinido", PaymentMethod.EM_ABERTO),
        ("", PaymentMethod.COTA_UNICA),
        (None, PaymentMethod.COTA_UNICA),
    ],
)
def test_method_labels(label, expected):
    assert PaymentMethod.parse(label) is expected


def test_parse_unit_coerces_legacy_values():
    unit = parse_unit(
        {
            "sequential": 42,
            "year": "2024",
            "singleValue": "1.234,56",
            "installmentValue": "R$ 1.300,00",
            "installmentsCount": "15",
            "chosenMethod": "Parcelado",
            "landArea": "",
            "hasWasteTax": "sim",
        }
    )
    assert unit.sequential == "42"
    assert unit.year == 2024
    assert unit.single_value == pytest.approx(1234.56)
    assert unit.installment_value == pytest.approx(1300)
    assert unit.installments_count == 12
    assert unit.chosen_method is PaymentMethod.PARCELADO
    assert unit.status is IptuStatus.EM_ABERTO
    assert unit.land_area is None
    assert unit.has_waste_tax is True


def test_parse_unit_requires_year():
    with pytest.raises(ValueError):
        parse_unit({"sequential": "A", "year": "n/a"})


def test_parse_tenant_and_record():
    tenant = parse_tenant({"id": "t1", "year": 2024.0, "occupiedArea": "120", "manualPercentage": None})
    assert (tenant.year, tenant.occupied_area, tenant.manual_percentage) == (2024, 120, None)

    record = parse_iptu_record({"id": "r1", "year": "2023", "value": 500, "selectedSequentials": "A, B,,C"})
    assert record.status is IptuStatus.PENDENTE
    assert record.selected_sequentials == ["A", "B", "C"]

    with pytest.raises(ValueError):
        parse_tenant({"year": 2024})


def test_parse_property_skips_bad_children():
    prop = parse_property(
        {
            "id": "p1",
            "name": "Galpão",
            "state": "sp",
            "zipCode": "13200-000",
            "possession": "Terceiros",
            "type": "galpao",
            "isComplex": "true",
            "units": [{"sequential": "A", "year": 2024}, {"sequential": "B"}, "lixo"],
            "tenants": "não é lista",
            "iptuHistory": [{"id": "h1", "year": 2023, "status": "Pago"}],
        }
    )
    assert prop.state == "SP"
    assert prop.zip_code == "13200-000"
    assert prop.possession is Possession.TERCEIROS
    assert prop.type is PropertyType.GALPAO
    assert prop.is_complex is True
    assert [u.sequential for u in prop.units] == ["A"]
    assert prop.tenants == []
    assert prop.iptu_history[0].status is IptuStatus.PAGO


def test_parse_properties_skips_rows_without_id():
    props = parse_properties([{"id": "1"}, {"name": "sem id"}, None, {"id": "2"}])
    assert [p.id for p in props] == ["1", "2"]


def test_json_dict_is_camel_case_and_parses_back():
    prop = parse_property(
        {
            "id": "p1",
            "name": "Horizon",
            "units": [{"sequential": "A", "year": 2024, "singleValue": 10, "dueDate": "15/04/2024"}],
            "tenants": [{"id": "t1", "year": 2024, "isSingleTenant": True}],
        }
    )
    data = to_json_dict(prop)
    assert "baseYear" not in data
    assert data["units"][0]["singleValue"] == 10
    assert data["units"][0]["chosenMethod"] == "Cota Única"
    assert data["tenants"][0]["isSingleTenant"] is True
    assert parse_property(data) == prop


def test_property_to_row_uses_snake_case_columns():
    prop = parse_property({"id": "p1", "type": "Loja", "units": [{"sequential": "A", "year": 2024}]})
    row = property_to_row(prop)
    assert row["type"] == "Loja"
    assert row["zip_code"] == ""
    assert row["units"][0]["installmentsCount"] == 1
    assert row["iptu_history"] == []
