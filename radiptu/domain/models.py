from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


def _label_key(value: object) -> str:
    """'  Cota ÚNICA ' -> 'cota unica'."""
    text = unicodedata.normalize("NFKD", str(value or ""))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return " ".join(text.lower().split())


class IptuStatus(str, Enum):
    PAGO = "Pago"
    PENDENTE = "Pendente"
    EM_ANDAMENTO = "Em andamento"
    EM_ABERTO = "Em aberto"

    @classmethod
    def parse(cls, value: object) -> "IptuStatus":
        """
        Status a partir de rótulo livre.

        Rótulos legados:
          - "Aberto"                 -> Em aberto
          - "Em análise", "Lançado"  -> Em andamento
          - vazio / desconhecido     -> Pendente
        """
        if isinstance(value, cls):
            return value
        return _STATUS_ALIASES.get(_label_key(value), cls.PENDENTE)


class PaymentMethod(str, Enum):
    COTA_UNICA = "Cota Única"
    PARCELADO = "Parcelado"
    EM_ABERTO = "Em aberto"

    @classmethod
    def parse(cls, value: object) -> "PaymentMethod":
        if isinstance(value, cls):
            return value
        key = _label_key(value)
        if not key:
            return cls.COTA_UNICA
        return _METHOD_ALIASES.get(key, cls.EM_ABERTO)


class Possession(str, Enum):
    GRUPO = "Grupo"
    TERCEIROS = "Terceiros"
    ESPECIFICO = "Específico"

    @classmethod
    def parse(cls, value: object) -> "Possession":
        if isinstance(value, cls):
            return value
        key = _label_key(value)
        for member in cls:
            if _label_key(member.value) == key:
                return member
        return cls.GRUPO


class PropertyType(str, Enum):
    LOJA = "Loja"
    GALPAO = "Galpão"
    TERRENO = "Terreno"
    SALA = "Sala"
    APARTAMENTO = "Apartamento"
    CASA = "Casa"
    INDUSTRIAL = "Industrial"
    COMERCIAL = "Comercial"
    RESIDENCIAL = "Residencial"
    PREDIO_COMERCIAL = "Prédio Comercial"
    SALA_COMERCIAL = "Sala Comercial"

    @classmethod
    def parse(cls, value: object) -> "PropertyType":
        if isinstance(value, cls):
            return value
        key = _label_key(value)
        for member in cls:
            if _label_key(member.value) == key:
                return member
        return cls.APARTAMENTO


_STATUS_ALIASES = {
    "pago": IptuStatus.PAGO,
    "pendente": IptuStatus.PENDENTE,
    "indefinido": IptuStatus.PENDENTE,
    "em andamento": IptuStatus.EM_ANDAMENTO,
    "em analise": IptuStatus.EM_ANDAMENTO,
    "lancado": IptuStatus.EM_ANDAMENTO,
    "em aberto": IptuStatus.EM_ABERTO,
    "aberto": IptuStatus.EM_ABERTO,
}

_METHOD_ALIASES = {
    "cota unica": PaymentMethod.COTA_UNICA,
    "parcelado": PaymentMethod.PARCELADO,
    "em aberto": PaymentMethod.EM_ABERTO,
    "indefinido": PaymentMethod.EM_ABERTO,
}


@dataclass(frozen=True)
class PropertyUnit:
    # --- chave lógica: (sequential, year) ---
    sequential: str
    year: int

    # --- valores do lançamento ---
    single_value: float = 0.0
    installment_value: float = 0.0
    installments_count: int = 1
    chosen_method: PaymentMethod = PaymentMethod.COTA_UNICA
    status: IptuStatus = IptuStatus.EM_ABERTO

    # --- dados descritivos do sequencial ---
    registration_number: Optional[str] = None
    address: Optional[str] = None
    owner_name: Optional[str] = None
    registry_owner: Optional[str] = None
    land_area: Optional[float] = None
    built_area: Optional[float] = None
    due_date: Optional[str] = None

    # --- taxa de lixo / IPTU não disponibilizado pela prefeitura ---
    has_waste_tax: bool = False
    waste_tax_value: float = 0.0
    iptu_not_available: bool = False


@dataclass(frozen=True)
class Tenant:
    id: str
    year: int
    name: str = ""
    occupied_area: float = 0.0
    is_single_tenant: bool = False
    manual_percentage: Optional[float] = None
    selected_sequential: Optional[str] = None
    contract_start: Optional[str] = None
    contract_end: Optional[str] = None


@dataclass(frozen=True)
class IptuRecord:
    id: str
    year: int
    value: float = 0.0
    status: IptuStatus = IptuStatus.PENDENTE
    single_value: float = 0.0
    installment_value: float = 0.0
    installments_count: int = 1
    chosen_method: PaymentMethod = PaymentMethod.COTA_UNICA
    holmes_company: Optional[str] = None
    start_date: Optional[str] = None
    due_date: Optional[str] = None
    selected_sequentials: List[str] = field(default_factory=list)
    receipt_url: Optional[str] = None
    iptu_not_available: bool = False


@dataclass(frozen=True)
class Property:
    id: str
    name: str = ""

    # --- endereço ---
    address: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""

    # --- titularidade ---
    owner_name: str = ""
    registry_owner: str = ""
    possession: Possession = Possession.GRUPO

    # --- classificação ---
    type: PropertyType = PropertyType.APARTAMENTO
    is_complex: bool = False
    registration_number: str = ""
    sequential: str = ""

    # --- dados físicos ---
    land_area: float = 0.0
    built_area: float = 0.0
    appraisal_value: float = 0.0

    base_year: Optional[int] = None
    last_updated: str = ""
    image_url: str = ""

    units: List[PropertyUnit] = field(default_factory=list)
    tenants: List[Tenant] = field(default_factory=list)
    iptu_history: List[IptuRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ApportionmentRow:
    tenant_id: str
    name: str
    percentage: float
    amount: float
