from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

COMPONENT_NAMES = (
    "icms", "pis", "cofins", "ipi", "ibs", "cbs", "imposto_seletivo", "outros",
)


def money(value: Decimal) -> Decimal:
    """Quantize to centavos (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxComponent:
    base_calculo: Decimal
    aliquota: Decimal  # percentual
    valor: Decimal
    cst: str
    origem: str | None = None
    credito: Decimal = ZERO  # IBS/CBS only


@dataclass(frozen=True)
class TaxBreakdown:
    """Tributos calculados para um item da nota."""

    icms: TaxComponent
    pis: TaxComponent
    cofins: TaxComponent
    ipi: TaxComponent | None = None
    ibs: TaxComponent | None = None
    cbs: TaxComponent | None = None
    imposto_seletivo: TaxComponent | None = None
    # Demais tributos recolhidos no DAS (Simples Nacional)
    outros: TaxComponent | None = None

    def components(self) -> Iterator[tuple[str, TaxComponent]]:
        """Yield (name, component) for every component present."""
        for name in COMPONENT_NAMES:
            comp = getattr(self, name)
            if comp is not None:
                yield name, comp

    @property
    def total_creditos(self) -> Decimal:
        return sum((c.credito for _, c in self.components()), ZERO)

    @property
    def total_tributos(self) -> Decimal:
        """Sum of every component's valor minus declared credits."""
        bruto = sum((c.valor for _, c in self.components()), ZERO)
        return money(bruto - self.total_creditos)
