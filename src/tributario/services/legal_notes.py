from __future__ import annotations

from tributario.models.regime import (
    LucroPresumido,
    LucroReal,
    Preparacao2026,
    SimplesNacional,
    SubstituicaoTributaria,
    TaxRegime,
)
from tributario.services.exceptions import UnknownRegimeError

_SIMPLES = (
    "Documento emitido por ME/EPP optante pelo Simples Nacional.",
    "Não gera direito a crédito fiscal de IPI.",
    "Não gera direito a crédito fiscal de ICMS.",
)
_PRESUMIDO = (
    "Empresa tributada pelo Lucro Presumido.",
    "Base legal: Lei nº 9.718/98 e alterações.",
)
_REAL = (
    "Empresa tributada pelo Lucro Real.",
    "Permite aproveitamento de créditos de PIS/COFINS.",
)
_SUBSTITUICAO = (
    "ICMS retido por substituição tributária.",
    "Base legal: Lei Complementar nº 87/96.",
)
_PREPARACAO_2026 = (
    "Valores de IBS/CBS/IS calculados em caráter informativo.",
    "Base legal: Emenda Constitucional nº 132/2023 e Lei Complementar nº 214/2025.",
)

REFORMA_AVISO = (
    "",
    "PREPARAÇÃO REFORMA TRIBUTÁRIA 2026:",
    "Sistema preparado para IBS/CBS/IS conforme EC 132/2023.",
)


def _regime_lines(regime: TaxRegime) -> tuple[str, ...]:
    if isinstance(regime, SimplesNacional):
        return _SIMPLES
    if isinstance(regime, LucroPresumido):
        return _PRESUMIDO
    if isinstance(regime, LucroReal):
        return _REAL
    if isinstance(regime, SubstituicaoTributaria):
        return _SUBSTITUICAO
    if isinstance(regime, Preparacao2026):
        return _PREPARACAO_2026
    raise UnknownRegimeError(regime)


def legal_notes(regime: TaxRegime) -> list[str]:
    """Return the mandatory disclosure lines for *regime*, in order.

    The reform-readiness block is always appended last.
    """
    return [*_regime_lines(regime), *REFORMA_AVISO]


def legal_notes_text(regime: TaxRegime, extra: str | None = None) -> str:
    """Join the legal notes into the NF-e "informações complementares" text.

    Free-text observations from the issuer, if any, follow the legal lines.
    """
    lines = legal_notes(regime)
    if extra and extra.strip():
        lines.extend(["", extra.strip()])
    return "\n".join(lines)
