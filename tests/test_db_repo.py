from psycopg.types.json import Jsonb

from radiptu.domain.models import Property, PropertyUnit
from radiptu.services.db_repo import PropertyRepository
from radiptu.utils.audit import build_audit_entry


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = conn.rowcount

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))

    def fetchall(self):
        return self.conn.rows

    def fetchone(self):
        return self.conn.rows[0] if self.conn.rows else None


class FakeConn:
    def __init__(self, rows=None, rowcount=1):
        self.rows = rows or []
        self.rowcount = rowcount
        self.executed = []

    def cursor(self, **kwargs):
        return FakeCursor(self)


def test_fetch_all_parses_rows_ordered_by_address():
    conn = FakeConn(
        rows=[
            {"id": "p1", "name": "A", "land_area": "10.5", "units": [{"sequential": "X", "year": 2024}], "tenants": None},
            {"id": None, "name": "sem id"},
        ]
    )
    props = PropertyRepository().fetch_all(conn)
    assert [p.id for p in props] == ["p1"]
    assert props[0].land_area == 10.5
    assert "ORDER BY address" in conn.executed[0][0]


def test_fetch_missing_returns_none():
    assert PropertyRepository().fetch(FakeConn(rows=[]), "p1") is None


def test_save_upserts_with_jsonb_collections():
    conn = FakeConn()
    prop = Property(id="p1", name="Horizon", units=[PropertyUnit(sequential="A", year=2024)])
    PropertyRepository().save(conn, prop)

    sql, params = conn.executed[0]
    assert sql.startswith("INSERT INTO public.properties")
    assert "ON CONFLICT (id) DO UPDATE SET" in sql
    assert params[0] == "p1"
    jsonb = [p for p in params if isinstance(p, Jsonb)]
    assert len(jsonb) == 3
    assert jsonb[0].obj[0]["sequential"] == "A"


def test_update_collections_reports_missing_row():
    repo = PropertyRepository()
    assert repo.update_collections(FakeConn(rowcount=1), "p1", [], [], [], "01/01/2025") is True
    assert repo.update_collections(FakeConn(rowcount=0), "p1", [], [], [], "01/01/2025") is False


def test_delete_and_audit_insert():
    repo = PropertyRepository()
    assert repo.delete(FakeConn(rowcount=0), "p1") is False

    conn = FakeConn()
    repo.insert_audit_log(conn, build_audit_entry("Exclusão de Imóvel", "ID: p1", user_email="a@b.c"))
    sql, params = conn.executed[0]
    assert sql.startswith("INSERT INTO public.audit_logs (user_id, user_email, user_name, action, details, created_at)")
    assert params[1:5] == ["a@b.c", "Usuário", "Exclusão de Imóvel", "ID: p1"]
