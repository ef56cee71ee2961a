from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from radiptu.config.env import DbConfig
from radiptu.domain.db import get_pg_connection
from radiptu.domain.models import IptuRecord, Property, PropertyUnit, Tenant
from radiptu.parsers.property_parser import parse_properties, parse_property, property_to_row, to_json_dict
from radiptu.utils.audit import AuditEntry
from radiptu.utils.retry import retry_call

logger = logging.getLogger(__name__)


PROPERTY_DB_COLUMNS = [
    "id",
    "name",
    "address",
    "neighborhood",
    "city",
    "state",
    "zip_code",
    "owner_name",
    "registry_owner",
    "possession",
    "type",
    "is_complex",
    "registration_number",
    "sequential",
    "land_area",
    "built_area",
    "appraisal_value",
    "base_year",
    "last_updated",
    "image_url",
    "units",
    "tenants",
    "iptu_history",
]

JSONB_COLUMNS = ("units", "tenants", "iptu_history")


@dataclass
class DbConnectionManager:
    db_config: Optional[DbConfig] = None

    def __enter__(self):
        self.conn = retry_call(
            lambda: get_pg_connection(self.db_config),
            retries=2,
            backoff_s=0.5,
            retry_exceptions=(psycopg.OperationalError,),
        )
        return self.conn

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc:
                self.conn.rollback()
            else:
                self.conn.commit()
        finally:
            self.conn.close()


class PropertyRepository:
    def fetch_all(self, conn) -> List[Property]:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(f"SELECT {', '.join(PROPERTY_DB_COLUMNS)} FROM public.properties ORDER BY address;")
            rows = cur.fetchall()
        properties = parse_properties(rows)
        logger.debug("[DB] fetch_all -> %d linhas, %d imóveis válidos", len(rows), len(properties))
        return properties

    def fetch(self, conn, property_id: str) -> Optional[Property]:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"SELECT {', '.join(PROPERTY_DB_COLUMNS)} FROM public.properties WHERE id = %s;",
                (property_id,),
            )
            row = cur.fetchone()
        if not row:
            return None
        return parse_property(row)

    def property_db_row(self, prop: Property) -> Dict[str, Any]:
        row = property_to_row(prop)
        for col in JSONB_COLUMNS:
            row[col] = Jsonb(row[col])
        return row

    def save(self, conn, prop: Property) -> None:
        row = self.property_db_row(prop)

        cols = list(row.keys())
        placeholders = ", ".join(["%s"] * len(cols))
        set_sql = ", ".join([f"{k} = EXCLUDED.{k}" for k in cols if k != "id"])

        sql = f"""
            INSERT INTO public.properties ({", ".join(cols)})
            VALUES ({placeholders})
            ON CONFLICT (id)
            DO UPDATE SET
                {set_sql},
                updated_at = now();
        """

        try:
            with conn.cursor() as cur:
                cur.execute(sql, [row[k] for k in cols])
            logger.debug("[DB] save id=%s unidades=%d lançamentos=%d", prop.id, len(prop.units), len(prop.iptu_history))
        except psycopg.Error as exc:
            logger.exception("[DB] save falhou id=%s: %s", prop.id, exc)
            raise

    def update_collections(
        self,
        conn,
        property_id: str,
        units: Sequence[PropertyUnit],
        tenants: Sequence[Tenant],
        iptu_history: Sequence[IptuRecord],
        last_updated: str,
    ) -> bool:
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE public.properties
                    SET
                      units        = %s,
                      tenants      = %s,
                      iptu_history = %s,
                      last_updated = %s,
                      updated_at   = now()
                    WHERE id = %s;
                    """,
                    (
                        Jsonb([to_json_dict(u) for u in units]),
                        Jsonb([to_json_dict(t) for t in tenants]),
                        Jsonb([to_json_dict(h) for h in iptu_history]),
                        last_updated,
                        property_id,
                    ),
                )
                updated = cur.rowcount > 0
        except psycopg.Error as exc:
            logger.exception("[DB] update_collections falhou id=%s: %s", property_id, exc)
            raise

        if not updated:
            logger.warning("[DB] update_collections: imóvel %s não encontrado", property_id)
        return updated

    def delete(self, conn, property_id: str) -> bool:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM public.properties WHERE id = %s;", (property_id,))
            deleted = cur.rowcount > 0
        logger.info("[DB] delete id=%s -> %s", property_id, deleted)
        return deleted

    def insert_audit_log(self, conn, entry: AuditEntry) -> None:
        row = entry.as_row()
        cols = list(row.keys())
        with conn.cursor() as cur:
            cur.execute(
                f"INSERT INTO public.audit_logs ({', '.join(cols)}) VALUES ({', '.join(['%s'] * len(cols))});",
                [row[k] for k in cols],
            )

    def fetch_audit_logs(self, conn, limit: int = 100) -> List[Dict[str, Any]]:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, user_id, user_email, user_name, action, details, created_at
                FROM public.audit_logs
                ORDER BY created_at DESC
                LIMIT %s;
                """,
                (limit,),
            )
            return list(cur.fetchall())
