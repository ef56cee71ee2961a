from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from radiptu.domain.models import Property
from radiptu.parsers.property_parser import parse_properties, to_json_dict

logger = logging.getLogger(__name__)


class LocalCacheRepository:
    """
    Última carteira buscada com sucesso, gravada em JSON (mesmo formato
    camelCase das colunas JSONB). Serve de fallback quando o banco cai.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[List[Property]]:
        if not self.path.exists():
            logger.debug("[CACHE] %s não existe", self.path)
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("[CACHE] cache ilegível em %s: %s", self.path, exc)
            return None
        if not isinstance(data, list):
            logger.warning("[CACHE] estrutura inválida em %s (esperada lista)", self.path)
            return None
        properties = parse_properties(data)
        logger.info("[CACHE] %d imóveis carregados de %s", len(properties), self.path)
        return properties

    def save(self, properties: Sequence[Property]) -> None:
        payload = [to_json_dict(p) for p in properties]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)
        logger.debug("[CACHE] %d imóveis gravados em %s", len(payload), self.path)
