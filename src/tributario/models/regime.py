from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

from tributario.services.exceptions import UnknownRegimeError
from tributario.services.tables import MVA_PADRAO, SIMPLES_ANEXOS, SIMPLES_FAIXAS


@dataclass(frozen=True)
class SimplesNacional:
    """ME/EPP optante pelo Simples Nacional."""

    anexo: str = "I"
    faixa_receita: int = 0

    def __post_init__(self) -> None:
        if self.anexo not in SIMPLES_ANEXOS:
            raise ValueError(f"Anexo do Simples Nacional invalido: '{self.anexo}'")
        if not 0 <= self.faixa_receita < SIMPLES_FAIXAS:
            raise ValueError(
                f"Faixa de receita deve estar entre 0 e {SIMPLES_FAIXAS - 1}"
            )


@dataclass(frozen=True)
class LucroPresumido:
    estado: str = "SP"


@dataclass(frozen=True)
class LucroReal:
    estado: str = "SP"
    tem_credito: bool = True


@dataclass(frozen=True)
class SubstituicaoTributaria:
    estado: str = "SP"
    mva: Decimal = MVA_PADRAO  # margem de valor agregado, em %

    def __post_init__(self) -> None:
        mva = _to_decimal(self.mva, "MVA")
        if mva < 0:
            raise ValueError("MVA nao pode ser negativa")
        object.__setattr__(self, "mva", mva)


@dataclass(frozen=True)
class Preparacao2026:
    """Simulação IBS/CBS/IS da reforma tributária (EC 132/2023)."""

    ncm: str = ""
    tem_credito: bool = True


TaxRegime = Union[
    SimplesNacional,
    LucroPresumido,
    LucroReal,
    SubstituicaoTributaria,
    Preparacao2026,
]

REGIME_TYPES: tuple[type, ...] = (
    SimplesNacional,
    LucroPresumido,
    LucroReal,
    SubstituicaoTributaria,
    Preparacao2026,
)


def _to_decimal(value: object, campo: str) -> Decimal:
    try:
        d = Decimal(str(value))
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"{campo}: valor numerico invalido '{value}'") from None
    return d


def _flag(d: dict, key: str, default: bool = True) -> bool:
    """Read a YAML boolean; quoted strings like "false" are rejected, not coerced."""
    value = d.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} deve ser true ou false, recebido: {value!r}")
    return value


def regime_from_dict(d: dict) -> TaxRegime:
    """Create a regime from a YAML-loaded dict keyed by ``tipo``.

    Raises UnknownRegimeError for an unrecognized ``tipo``.
    """
    tipo = str(d.get("tipo", "")).strip().lower()
    estado = str(d.get("estado", "SP")).upper()
    if tipo == "simples":
        return SimplesNacional(
            anexo=str(d.get("anexo", "I")).upper(),
            faixa_receita=int(d.get("faixa_receita", 0)),
        )
    if tipo == "presumido":
        return LucroPresumido(estado=estado)
    if tipo == "real":
        return LucroReal(estado=estado, tem_credito=_flag(d, "tem_credito"))
    if tipo == "substituicao":
        return SubstituicaoTributaria(estado=estado, mva=d.get("mva", MVA_PADRAO))
    if tipo == "2026":
        return Preparacao2026(
            ncm=str(d.get("ncm", "")),
            tem_credito=_flag(d, "tem_credito"),
        )
    raise UnknownRegimeError(d.get("tipo"))


def regime_label(regime: TaxRegime) -> str:
    """Human-readable regime name, e.g. for report headers."""
    if isinstance(regime, SimplesNacional):
        return f"Simples Nacional (Anexo {regime.anexo}, faixa {regime.faixa_receita})"
    if isinstance(regime, LucroPresumido):
        return f"Lucro Presumido ({regime.estado})"
    if isinstance(regime, LucroReal):
        return f"Lucro Real ({regime.estado})"
    if isinstance(regime, SubstituicaoTributaria):
        return f"Substituição Tributária ({regime.estado}, MVA {regime.mva}%)"
    if isinstance(regime, Preparacao2026):
        return "Preparação Reforma Tributária 2026"
    raise UnknownRegimeError(regime)
