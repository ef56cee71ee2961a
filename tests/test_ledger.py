from datetime import date

import pytest

from radiptu.domain.ledger import (
    DEFAULT_NEW_CHARGE_INSTALLMENTS,
    delete_iptu_record,
    delete_unit,
    link_tenant_to_sequential,
    remove_tenant,
    start_new_charge,
    upsert_iptu_record,
    upsert_tenant,
    upsert_unit,
    used_sequentials,
)
from radiptu.domain.models import IptuRecord, IptuStatus, PaymentMethod, Property, PropertyUnit, Tenant


def _prop(**kwargs):
    base = dict(
        id="p1",
        name="Edifício Horizon",
        address="Av. Paulista, 1000",
        registration_number="123.456",
        owner_name="Ricardo",
        land_area=1200,
        built_area=85,
        last_updated="01/01/2024",
    )
    base.update(kwargs)
    return Property(**base)


def test_upsert_record_syncs_existing_unit_and_touches_date():
    prop = _prop(units=[PropertyUnit(sequential="A", year=2024, single_value=100, address="Rua A")])
    record = IptuRecord(
        id="r1",
        year=2024,
        value=1000,
        status=IptuStatus.PAGO,
        single_value=1000,
        installment_value=1100,
        installments_count=10,
        chosen_method=PaymentMethod.COTA_UNICA,
        selected_sequentials=["A"],
    )
    updated = upsert_iptu_record(prop, record, today=date(2024, 3, 5))

    assert updated.iptu_history == [record]
    unit = updated.units[0]
    assert (unit.status, unit.single_value, unit.installments_count) == (IptuStatus.PAGO, 1000, 10)
    assert unit.address == "Rua A"
    assert updated.last_updated == "05/03/2024"
    # entrada intacta
    assert prop.units[0].single_value == 100
    assert prop.iptu_history == []


def test_upsert_record_creates_missing_unit_from_previous_year():
    prop = _prop(units=[PropertyUnit(sequential="A", year=2023, address="Rua A", land_area=300, has_waste_tax=True)])
    record = IptuRecord(id="r1", year=2024, value=500, selected_sequentials=["A", "B"])
    updated = upsert_iptu_record(prop, record)

    new_a = next(u for u in updated.units if u.sequential == "A" and u.year == 2024)
    new_b = next(u for u in updated.units if u.sequential == "B")
    assert (new_a.address, new_a.land_area, new_a.has_waste_tax) == ("Rua A", 300, True)
    assert (new_b.address, new_b.land_area, new_b.registration_number) == ("Av. Paulista, 1000", 1200, "123.456")
    assert updated.last_updated == "01/01/2024"


def test_new_unit_of_complex_does_not_inherit_property_area():
    prop = _prop(is_complex=True)
    updated = upsert_iptu_record(prop, IptuRecord(id="r1", year=2024, selected_sequentials=["X"]))
    assert (updated.units[0].land_area, updated.units[0].built_area) == (0.0, 0.0)


def test_upsert_record_replaces_by_id_and_sorts_new_entries():
    prop = _prop(iptu_history=[IptuRecord(id="h23", year=2023), IptuRecord(id="h22", year=2022)])
    updated = upsert_iptu_record(prop, IptuRecord(id="h24", year=2024))
    assert [h.id for h in updated.iptu_history] == ["h24", "h23", "h22"]

    edited = upsert_iptu_record(updated, IptuRecord(id="h22", year=2022, value=999))
    assert [h.id for h in edited.iptu_history] == ["h24", "h23", "h22"]
    assert edited.iptu_history[2].value == 999


def test_used_sequentials_excludes_edited_record():
    prop = _prop(
        iptu_history=[
            IptuRecord(id="r1", year=2024, selected_sequentials=["A", "B"]),
            IptuRecord(id="r2", year=2024, selected_sequentials=["B", "C"]),
            IptuRecord(id="r3", year=2023, selected_sequentials=["D"]),
        ]
    )
    assert used_sequentials(prop, 2024) == ["A", "B", "C"]
    assert used_sequentials(prop, 2024, exclude_record_id="r2") == ["A", "B"]


def test_delete_record_keeps_units():
    prop = _prop(
        units=[PropertyUnit(sequential="A", year=2024)],
        iptu_history=[IptuRecord(id="r1", year=2024, selected_sequentials=["A"])],
    )
    updated = delete_iptu_record(prop, "r1")
    assert updated.iptu_history == []
    assert len(updated.units) == 1


def test_upsert_unit_inserts_at_front_or_replaces():
    prop = _prop(units=[PropertyUnit(sequential="A", year=2024)])
    added = upsert_unit(prop, PropertyUnit(sequential="B", year=2024))
    assert [u.sequential for u in added.units] == ["B", "A"]

    replaced = upsert_unit(added, PropertyUnit(sequential="A", year=2024, single_value=77), today=date(2024, 6, 1))
    assert [u.sequential for u in replaced.units] == ["B", "A"]
    assert replaced.units[1].single_value == 77
    assert replaced.last_updated == "01/06/2024"


def test_delete_unit_matches_sequential_year_and_registration():
    prop = _prop(
        units=[
            PropertyUnit(sequential="A", year=2024, registration_number="111"),
            PropertyUnit(sequential="A", year=2024, registration_number="222"),
            PropertyUnit(sequential="A", year=2023, registration_number="111"),
        ]
    )
    updated = delete_unit(prop, "A", 2024, registration_number="111")
    assert [(u.year, u.registration_number) for u in updated.units] == [(2024, "222"), (2023, "111")]


def test_start_new_charge_copies_latest_units_zeroed():
    prop = _prop(
        units=[
            PropertyUnit(sequential="A", year=2023, single_value=100, address="velho"),
            PropertyUnit(
                sequential="A",
                year=2024,
                single_value=900,
                installment_value=1000,
                installments_count=8,
                chosen_method=PaymentMethod.PARCELADO,
                status=IptuStatus.PAGO,
                due_date="10/02/2024",
                address="novo",
            ),
            PropertyUnit(sequential="B", year=2022, single_value=50, installments_count=0),
        ]
    )
    updated = start_new_charge(prop, 2025)
    new_units = [u for u in updated.units if u.year == 2025]

    assert updated.base_year == 2025
    assert [u.sequential for u in new_units] == ["A", "B"]
    a, b = new_units
    assert (a.single_value, a.installment_value, a.installments_count) == (0.0, 0.0, 8)
    assert (a.chosen_method, a.status, a.due_date, a.address) == (
        PaymentMethod.COTA_UNICA,
        IptuStatus.EM_ABERTO,
        None,
        "novo",
    )
    assert b.installments_count == DEFAULT_NEW_CHARGE_INSTALLMENTS
    assert len(updated.units) == 5


def test_start_new_charge_skips_sequentials_already_open():
    prop = _prop(units=[PropertyUnit(sequential="A", year=2025), PropertyUnit(sequential="A", year=2024)])
    updated = start_new_charge(prop, 2025)
    assert len(updated.units) == 2
    assert updated.base_year == 2025


def test_single_tenant_flag_is_exclusive_per_year():
    prop = _prop(
        tenants=[
            Tenant(id="t1", year=2024, is_single_tenant=True),
            Tenant(id="t2", year=2023, is_single_tenant=True),
        ]
    )
    updated = upsert_tenant(prop, Tenant(id="t3", year=2024, is_single_tenant=True))
    flags = {t.id: t.is_single_tenant for t in updated.tenants}
    assert flags == {"t3": True, "t1": False, "t2": True}
    assert updated.tenants[0].id == "t3"


def test_remove_tenant():
    prop = _prop(tenants=[Tenant(id="t1", year=2024), Tenant(id="t2", year=2024)])
    assert [t.id for t in remove_tenant(prop, "t1").tenants] == ["t2"]


def test_link_tenant_uses_unit_area():
    prop = _prop(
        units=[
            PropertyUnit(sequential="A", year=2024, land_area=0, built_area=65),
            PropertyUnit(sequential="A", year=2023, land_area=999),
        ],
        tenants=[Tenant(id="t1", year=2024, occupied_area=10)],
    )
    updated = link_tenant_to_sequential(prop, "t1", "A")
    tenant = updated.tenants[0]
    assert (tenant.selected_sequential, tenant.occupied_area) == ("A", 65)


def test_link_unknown_tenant_raises():
    with pytest.raises(KeyError):
        link_tenant_to_sequential(_prop(), "missing", "A")
