import logging
from typing import Optional

import psycopg

from radiptu.config.env import DbConfig, load_db_config

logger = logging.getLogger(__name__)


def get_pg_connection(db_config: Optional[DbConfig] = None) -> psycopg.Connection:
    """
    Nova conexão com o PostgreSQL (esquema em utils/db_utils/radiptu_schema.sql):

        properties  (id TEXT PK, colunas do imóvel, units/tenants/iptu_history JSONB)
        audit_logs  (id BIGSERIAL PK, user_*, action, details, created_at)
    """
    cfg = db_config or load_db_config()
    try:
        return psycopg.connect(**cfg.conninfo_kwargs())
    except psycopg.Error as e:
        logger.exception("[DB] Não foi possível conectar ao PostgreSQL em %s:%s: %s", cfg.host, cfg.port, e)
        raise
