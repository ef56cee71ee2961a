import logging
from pathlib import Path

import psycopg

from radiptu.config.env import load_db_config

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).with_name("radiptu_schema.sql")


def execute_sql_file(filename: Path, db_config: dict) -> None:
    logger.info("[DB] Lendo %s", filename)
    sql_script = Path(filename).read_text(encoding="utf-8")

    # psycopg.connect como context manager: commit no sucesso, rollback no erro
    with psycopg.connect(**db_config) as conn:
        with conn.cursor() as cur:
            cur.execute(sql_script)
    logger.info("[DB] Esquema aplicado com sucesso")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    execute_sql_file(SCHEMA_FILE, load_db_config().conninfo_kwargs())
