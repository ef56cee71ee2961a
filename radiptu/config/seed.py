from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml

from radiptu.domain.models import Property
from radiptu.parsers.property_parser import parse_properties

logger = logging.getLogger(__name__)


def load_seed_properties(path: Path) -> List[Property]:
    """
    Carteira de demonstração em YAML (lista de imóveis, chaves em qualquer
    formato aceito pelo parser). Usada quando não há banco nem cache.
    """
    if not path.exists():
        logger.error("[SEED] Arquivo de seed não encontrado: %s", path)
        return []

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
    except (OSError, yaml.YAMLError) as exc:
        logger.exception("[SEED] Não foi possível ler %s: %s", path, exc)
        return []

    if not isinstance(data, list):
        logger.error("[SEED] Estrutura YAML inválida (esperada lista): %s", path)
        return []

    properties = parse_properties(data)
    logger.info("[SEED] %d imóveis carregados de %s", len(properties), path)
    return properties
