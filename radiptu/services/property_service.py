from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, ContextManager, Dict, List, Optional

import psycopg

from radiptu.config.app_config import AppConfig
from radiptu.config.seed import load_seed_properties
from radiptu.domain.models import Property
from radiptu.services.cache import LocalCacheRepository
from radiptu.services.db_repo import DbConnectionManager, PropertyRepository
from radiptu.utils.audit import build_audit_entry

logger = logging.getLogger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_CACHE = "cache"
SOURCE_SEED = "seed"


class PropertyService:
    """
    Orquestra banco, cache local e seed.

    Leitura: banco -> (grava cache) ; banco fora -> cache -> seed.
    Escrita: busca o imóvel, aplica a operação do ledger, grava a linha
    inteira e registra a ação em audit_logs.
    """

    def __init__(
        self,
        repository: Optional[PropertyRepository] = None,
        cache: Optional[LocalCacheRepository] = None,
        seed_path: Optional[Path] = None,
        connection_factory: Optional[Callable[[], ContextManager[Any]]] = None,
        offline: bool = False,
        user_id: Optional[str] = None,
        user_email: Optional[str] = None,
        user_name: Optional[str] = None,
    ):
        self.repository = repository or PropertyRepository()
        self.cache = cache
        self.seed_path = seed_path
        self.connection_factory = connection_factory or DbConnectionManager
        self.offline = offline
        self.user_id = user_id
        self.user_email = user_email
        self.user_name = user_name
        self.source: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: AppConfig, **kwargs) -> "PropertyService":
        return cls(
            cache=LocalCacheRepository(cfg.cache.path),
            seed_path=cfg.cache.seed_yaml,
            connection_factory=lambda: DbConnectionManager(cfg.database),
            offline=cfg.offline,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # leitura
    # ------------------------------------------------------------------

    def fetch_properties(self) -> List[Property]:
        if not self.offline:
            try:
                with self.connection_factory() as conn:
                    properties = self.repository.fetch_all(conn)
            except psycopg.Error as exc:
                logger.warning("[SERVICE] Banco indisponível, usando dados locais: %s", exc)
            else:
                self.source = SOURCE_REMOTE
                self._save_cache(properties)
                return properties

        if self.cache is not None:
            cached = self.cache.load()
            if cached is not None:
                self.source = SOURCE_CACHE
                return cached

        self.source = SOURCE_SEED
        if self.seed_path is None:
            logger.warning("[SERVICE] Sem banco, cache ou seed: carteira vazia")
            return []
        return load_seed_properties(self.seed_path)

    def _save_cache(self, properties: List[Property]) -> None:
        if self.cache is None:
            return
        try:
            self.cache.save(properties)
        except OSError as exc:
            logger.warning("[SERVICE] Não foi possível gravar o cache local: %s", exc)

    def recent_audit_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        with self.connection_factory() as conn:
            return self.repository.fetch_audit_logs(conn, limit=limit)

    # ------------------------------------------------------------------
    # escrita
    # ------------------------------------------------------------------

    def apply(
        self,
        property_id: str,
        mutation: Callable[[Property], Property],
        action: str,
        details: Optional[str] = None,
    ) -> Property:
        """
        Aplica `mutation` (ex.: lambda p: upsert_iptu_record(p, rec, today))
        ao imóvel atual e persiste o resultado.
        """
        with self.connection_factory() as conn:
            current = self.repository.fetch(conn, property_id)
            if current is None:
                raise KeyError(f"property {property_id!r} not found")
            updated = mutation(current)
            self.repository.save(conn, updated)

        logger.info("[SERVICE] %s: imóvel %s atualizado", action, property_id)
        self.log_action(action, details)
        return updated

    def save_property(self, prop: Property, action: str = "Cadastro de Imóvel") -> Property:
        with self.connection_factory() as conn:
            self.repository.save(conn, prop)
        self.log_action(action, f"Imóvel: {prop.name}")
        return prop

    def delete_property(self, property_id: str) -> bool:
        with self.connection_factory() as conn:
            deleted = self.repository.delete(conn, property_id)
        if deleted:
            self.log_action("Exclusão de Imóvel", f"ID: {property_id}")
        return deleted

    def log_action(self, action: str, details: Optional[str] = None) -> None:
        """Falha de auditoria nunca bloqueia a gravação."""
        try:
            entry = build_audit_entry(
                action,
                details,
                user_id=self.user_id,
                user_email=self.user_email,
                user_name=self.user_name,
            )
            with self.connection_factory() as conn:
                self.repository.insert_audit_log(conn, entry)
        except (psycopg.Error, ValueError) as exc:
            logger.warning("[SERVICE] Erro ao gravar log de auditoria (%s): %s", action, exc)
