from __future__ import annotations

import logging
import time
from typing import Callable, Tuple, Type, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_call(
    func: Callable[[], T],
    *,
    retries: int = 3,
    backoff_s: float = 0.5,
    retry_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    logger_name: str | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Reabre a conexão com o Postgres quando o banco ainda não responde
    (DbConnectionManager repassa psycopg.OperationalError). Se todas as
    tentativas falharem o erro sobe e o PropertyService cai para o cache local.
    """
    attempt = 0
    last_exc: BaseException | None = None
    log = logging.getLogger(logger_name) if logger_name else logger

    while attempt <= retries:
        try:
            return func()
        except retry_exceptions as exc:
            last_exc = exc
            if attempt >= retries:
                break
            wait = backoff_s * (2 ** attempt)
            log.warning(
                "[RETRY] nova tentativa após erro (%d/%d, espera=%.2fs): %s",
                attempt + 1,
                retries + 1,
                wait,
                exc,
            )
            sleep(wait)
            attempt += 1

    assert last_exc is not None
    raise last_exc
