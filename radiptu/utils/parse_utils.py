# radiptu/utils/parse_utils.py
from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

_THOUSANDS_RE = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def clean_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).replace("\n", " ").strip()
    return s if s != "" else None


def safe_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float, Decimal)):
        f = float(v)
        return f if math.isfinite(f) else None
    s = str(v).strip()
    if s == "":
        return None
    s = s.replace("R$", "").replace(" ", "")
    # formato brasileiro: 1.234,56 ou 1.500 (milhar sem centavos)
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    elif _THOUSANDS_RE.match(s):
        s = s.replace(".", "")
    try:
        f = float(s)
    except ValueError:
        return None
    return f if math.isfinite(f) else None


def safe_int(v: Any) -> Optional[int]:
    """Anos e contagens: '2024', 2024.0, ' 2024 ' -> 2024; lixo -> None."""
    f = safe_float(v)
    if f is None:
        return None
    return int(f)


def to_float(v: Any, default: float = 0.0) -> float:
    f = safe_float(v)
    return default if f is None else f


def to_installments(v: Any) -> int:
    """Quantidade de parcelas limitada a 1..12; vazio ou lixo -> 1."""
    n = safe_int(v) or 1
    return min(max(n, 1), 12)


def to_bool(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    return str(v).strip().lower() in ("true", "yes", "y", "1", "sim", "s")


def parse_date(v: Any) -> Optional[date]:
    """
    Suporte:
      - YYYY-MM-DD (input type=date; também aceita sufixo de hora ISO)
      - DD/MM/YYYY
    """
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v

    s = clean_str(v)
    if not s:
        return None

    m = re.match(r"^(\d{4})-(\d{2})-(\d{2})", s)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None

    m = re.match(r"^(\d{2})/(\d{2})/(\d{4})$", s)
    if m:
        try:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        except ValueError:
            return None

    return None


def format_br_date(d: date) -> str:
    """date(2024, 1, 15) -> '15/01/2024' (formato de last_updated)."""
    return d.strftime("%d/%m/%Y")


def prepare_for_json(obj):
    """Converte recursivamente Decimal, Enum e datas para tipos serializáveis em JSON."""
    if isinstance(obj, dict):
        return {k: prepare_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [prepare_for_json(i) for i in obj]
    elif isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return obj


def normalize_city(city: Any) -> str:
    """'  são   PAULO ' -> 'São Paulo'."""
    words = str(city or "").strip().lower().split()
    return " ".join(w[:1].upper() + w[1:] for w in words)
