"""Per-item tax calculation for each supported tax regime.

Inputs are assumed to be validated by the caller (see
``tributario.utils.validators``); the calculator only rejects regimes and
states it has no table for.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from tributario.models.regime import (
    LucroPresumido,
    LucroReal,
    Preparacao2026,
    SimplesNacional,
    SubstituicaoTributaria,
    TaxRegime,
)
from tributario.models.taxes import ZERO, TaxBreakdown, TaxComponent, money
from tributario.services import tables
from tributario.services.exceptions import UnknownRegimeError, UnknownStateError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _pct(base: Decimal, aliquota: Decimal) -> Decimal:
    return base * aliquota / HUNDRED


def aliquota_icms(estado: str) -> Decimal:
    """Internal ICMS rate for a UF. Raises UnknownStateError if not tabulated."""
    try:
        return tables.ICMS_UF[estado.upper()]
    except KeyError:
        raise UnknownStateError(estado) from None


def aliquota_simples(anexo: str, faixa_receita: int = 0) -> Decimal:
    """DAS rate for an anexo and revenue bracket (0..19)."""
    return tables.SIMPLES_ANEXOS[anexo][faixa_receita]


def _icms(base: Decimal, aliquota: Decimal, cst: str) -> TaxComponent:
    return TaxComponent(
        base_calculo=money(base),
        aliquota=aliquota,
        valor=money(_pct(base, aliquota)),
        cst=cst,
        origem=tables.ORIGEM_NACIONAL,
    )


def _federal(base: Decimal, aliquota: Decimal, cst: str) -> TaxComponent:
    return TaxComponent(
        base_calculo=money(base),
        aliquota=aliquota,
        valor=money(_pct(base, aliquota)),
        cst=cst,
    )


def calculate_simples(valor_total: Decimal, regime: SimplesNacional) -> TaxBreakdown:
    """Split the DAS amount among ICMS, PIS, COFINS and the remaining bundled taxes."""
    aliquota = aliquota_simples(regime.anexo, regime.faixa_receita)
    partilha = tables.SIMPLES_PARTILHA

    def share(name: str, cst: str, origem: str | None = None) -> TaxComponent:
        aliq = aliquota * partilha[name]
        return TaxComponent(
            base_calculo=money(valor_total),
            aliquota=aliq,
            valor=money(_pct(valor_total, aliq)),
            cst=cst,
            origem=origem,
        )

    return TaxBreakdown(
        icms=share("icms", tables.CST_ICMS_SIMPLES, tables.ORIGEM_NACIONAL),
        pis=share("pis", tables.CST_PIS_COFINS_OUTRAS_SAIDAS),
        cofins=share("cofins", tables.CST_PIS_COFINS_OUTRAS_SAIDAS),
        outros=share("outros", tables.CST_OUTROS),
    )


def calculate_presumido(valor_total: Decimal, regime: LucroPresumido) -> TaxBreakdown:
    """ICMS at the state rate, PIS/COFINS cumulative (0.65% / 3%)."""
    return TaxBreakdown(
        icms=_icms(valor_total, aliquota_icms(regime.estado), tables.CST_ICMS_TRIBUTADA),
        pis=_federal(valor_total, tables.PIS_CUMULATIVO, tables.CST_PIS_COFINS_TRIBUTAVEL),
        cofins=_federal(
            valor_total, tables.COFINS_CUMULATIVO, tables.CST_PIS_COFINS_TRIBUTAVEL
        ),
    )


def calculate_real(valor_total: Decimal, regime: LucroReal) -> TaxBreakdown:
    """ICMS at the state rate, PIS/COFINS non-cumulative (1.65% / 7.6%)."""
    cst = tables.CST_ICMS_TRIBUTADA if regime.tem_credito else tables.CST_ICMS_ISENTA
    return TaxBreakdown(
        icms=_icms(valor_total, aliquota_icms(regime.estado), cst),
        pis=_federal(
            valor_total, tables.PIS_NAO_CUMULATIVO, tables.CST_PIS_COFINS_TRIBUTAVEL
        ),
        cofins=_federal(
            valor_total, tables.COFINS_NAO_CUMULATIVO, tables.CST_PIS_COFINS_TRIBUTAVEL
        ),
    )


def calculate_substituicao(
    valor_total: Decimal, regime: SubstituicaoTributaria, mva: Decimal | None = None
) -> TaxBreakdown:
    """ICMS-ST over the MVA-adjusted base; PIS/COFINS with zero base."""
    mva = regime.mva if mva is None else Decimal(mva)
    base_st = valor_total * (1 + mva / HUNDRED)
    zero = TaxComponent(
        base_calculo=money(valor_total),
        aliquota=ZERO,
        valor=ZERO,
        cst=tables.CST_PIS_COFINS_ALIQUOTA_ZERO,
    )
    return TaxBreakdown(
        icms=_icms(base_st, aliquota_icms(regime.estado), tables.CST_ICMS_ST),
        pis=zero,
        cofins=zero,
    )


def calculate_2026(
    valor_total: Decimal, regime: Preparacao2026, ncm: str = ""
) -> TaxBreakdown:
    """IBS/CBS (with 90% credit when eligible) and IS for tobacco; legacy taxes zeroed."""
    ncm = ncm or regime.ncm
    aliquotas = tables.REFORMA_ALIQUOTAS

    def reforma(name: str) -> TaxComponent:
        valor = money(_pct(valor_total, aliquotas[name]))
        credito = money(valor * tables.REFORMA_CREDITO) if regime.tem_credito else ZERO
        return TaxComponent(
            base_calculo=money(valor_total),
            aliquota=aliquotas[name],
            valor=valor,
            cst=tables.CST_IBS_CBS_INTEGRAL,
            credito=credito,
        )

    imposto_seletivo = None
    if ncm.startswith(tables.NCM_IMPOSTO_SELETIVO):
        imposto_seletivo = _federal(
            valor_total, aliquotas["is"], tables.CST_IBS_CBS_INTEGRAL
        )

    return TaxBreakdown(
        icms=TaxComponent(
            base_calculo=ZERO,
            aliquota=ZERO,
            valor=ZERO,
            cst=tables.CST_ICMS_NAO_TRIBUTADA,
            origem=tables.ORIGEM_NACIONAL,
        ),
        pis=TaxComponent(ZERO, ZERO, ZERO, tables.CST_PIS_COFINS_ISENTA),
        cofins=TaxComponent(ZERO, ZERO, ZERO, tables.CST_PIS_COFINS_ISENTA),
        ibs=reforma("ibs"),
        cbs=reforma("cbs"),
        imposto_seletivo=imposto_seletivo,
    )


def calculate_taxes(
    valor_total: Decimal | int | str,
    regime: TaxRegime,
    ncm: str = "",
    mva: Decimal | int | str | None = None,
) -> TaxBreakdown:
    """Compute the tax breakdown of one line item under *regime*.

    ``mva`` overrides the MVA of a SubstituicaoTributaria regime and a
    non-empty ``ncm`` overrides the NCM of a Preparacao2026 regime.
    Raises UnknownRegimeError for anything that is not a supported regime.
    """
    valor = Decimal(str(valor_total))
    logger.debug("Calculating taxes for %s under %r", valor, regime)

    if isinstance(regime, SimplesNacional):
        return calculate_simples(valor, regime)
    if isinstance(regime, LucroPresumido):
        return calculate_presumido(valor, regime)
    if isinstance(regime, LucroReal):
        return calculate_real(valor, regime)
    if isinstance(regime, SubstituicaoTributaria):
        return calculate_substituicao(
            valor, regime, None if mva is None else Decimal(str(mva))
        )
    if isinstance(regime, Preparacao2026):
        return calculate_2026(valor, regime, ncm)
    raise UnknownRegimeError(regime)
