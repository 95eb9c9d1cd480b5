"""Rate tables used by the tax calculator.

All tables are read-only mappings built once at import time, so they can be
shared across threads without locking.
"""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType


def _d(*values: str) -> tuple[Decimal, ...]:
    return tuple(Decimal(v) for v in values)


# Alíquota interna de ICMS por UF (percentual)
ICMS_UF: MappingProxyType[str, Decimal] = MappingProxyType({
    "AC": Decimal("17"), "AL": Decimal("17"), "AP": Decimal("18"),
    "AM": Decimal("18"), "BA": Decimal("18"), "CE": Decimal("18"),
    "DF": Decimal("18"), "ES": Decimal("17"), "GO": Decimal("17"),
    "MA": Decimal("18"), "MT": Decimal("17"), "MS": Decimal("17"),
    "MG": Decimal("18"), "PA": Decimal("17"), "PB": Decimal("18"),
    "PR": Decimal("18"), "PE": Decimal("18"), "PI": Decimal("18"),
    "RJ": Decimal("20"), "RN": Decimal("18"), "RS": Decimal("18"),
    "RO": Decimal("17.5"), "RR": Decimal("17"), "SC": Decimal("17"),
    "SP": Decimal("18"), "SE": Decimal("18"), "TO": Decimal("18"),
})

# Alíquota do DAS por anexo, indexada pela faixa de receita (0..19)
SIMPLES_ANEXOS: MappingProxyType[str, tuple[Decimal, ...]] = MappingProxyType({
    "I": _d(
        "4.0", "7.3", "9.5", "10.7", "11.2", "11.7", "12.2", "12.7", "13.2", "13.7",
        "14.2", "14.7", "15.2", "15.7", "16.2", "16.7", "17.2", "17.7", "18.2", "18.7",
    ),
    "II": _d(
        "4.5", "7.8", "10.0", "11.2", "11.7", "12.2", "12.7", "13.2", "13.7", "14.2",
        "14.7", "15.2", "15.7", "16.2", "16.7", "17.2", "17.7", "18.2", "18.7", "19.2",
    ),
    "III": _d("6.0", "11.2", "13.5", "16.0", *(["21.0"] * 16)),
    "IV": _d("4.5", "9.0", "10.2", "14.0", *(["22.0"] * 16)),
    "V": _d(*(["15.5"] * 20)),
})

SIMPLES_FAIXAS = 20

# Partilha do DAS entre os tributos destacados no item.
# OUTROS cobre IRPJ, CSLL, CPP e IPI recolhidos na mesma guia.
SIMPLES_PARTILHA: MappingProxyType[str, Decimal] = MappingProxyType({
    "icms": Decimal("0.34"),
    "pis": Decimal("0.08"),
    "cofins": Decimal("0.37"),
    "outros": Decimal("0.21"),
})

PIS_CUMULATIVO = Decimal("0.65")
COFINS_CUMULATIVO = Decimal("3.0")
PIS_NAO_CUMULATIVO = Decimal("1.65")
COFINS_NAO_CUMULATIVO = Decimal("7.6")

MVA_PADRAO = Decimal("30")

# Reforma tributária (EC 132/2023), alíquotas estimadas
REFORMA_ALIQUOTAS: MappingProxyType[str, Decimal] = MappingProxyType({
    "ibs": Decimal("8.8"),
    "cbs": Decimal("8.8"),
    "is": Decimal("1.0"),
})
REFORMA_CREDITO = Decimal("0.9")

# NCM sujeito ao Imposto Seletivo (cigarros)
NCM_IMPOSTO_SELETIVO = ("2402",)

ORIGEM_NACIONAL = "0"

CST_ICMS_SIMPLES = "101"
CST_ICMS_TRIBUTADA = "00"
CST_ICMS_ISENTA = "40"
CST_ICMS_NAO_TRIBUTADA = "41"
CST_ICMS_ST = "60"
CST_PIS_COFINS_TRIBUTAVEL = "01"
CST_PIS_COFINS_ALIQUOTA_ZERO = "04"
CST_PIS_COFINS_ISENTA = "07"
CST_PIS_COFINS_OUTRAS_SAIDAS = "49"
CST_OUTROS = "99"
CST_IBS_CBS_INTEGRAL = "000"
