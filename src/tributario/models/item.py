from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tributario.models.taxes import TaxBreakdown


@dataclass(frozen=True)
class LineItem:
    """Item (produto) de uma NF-e com os tributos já calculados."""

    codigo: str
    descricao: str
    ncm: str  # 8 dígitos, sem pontuação
    cfop: str  # 4 dígitos, sem pontuação
    quantidade: Decimal
    valor_unitario: Decimal
    valor_total: Decimal
    tributos: TaxBreakdown
    gtin: str | None = None  # obrigatório desde 2025
    unidade: str = "UN"
