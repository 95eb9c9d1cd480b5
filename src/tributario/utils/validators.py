"""Field validators for NF-e data entry.

Every validator takes one raw value and returns a ValidationResult; malformed
input (empty, wrong length, bad checksum) is reported, never raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from tributario.models.taxes import money
from tributario.services.tables import ICMS_UF

VALOR_MAXIMO = Decimal("999999999.99")
QUANTIDADE_MAXIMA = Decimal("999999999.9999")
TOLERANCIA_TOTAL = Decimal("0.01")

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

_CFOP_DIRECAO = {
    "1": ("Entrada", "Aquisição dentro do estado"),
    "2": ("Entrada", "Aquisição de outros estados"),
    "3": ("Entrada", "Aquisição do exterior"),
    "5": ("Saída", "Venda dentro do estado"),
    "6": ("Saída", "Venda para outros estados"),
    "7": ("Saída", "Venda para o exterior"),
}


@dataclass(frozen=True)
class ValidationResult:
    valido: bool
    erro: str | None = None
    aviso: str | None = None


OK = ValidationResult(True)


def _fail(erro: str) -> ValidationResult:
    return ValidationResult(False, erro=erro)


def only_digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def _repeated(digits: str) -> bool:
    return len(set(digits)) == 1


def cpf_check_digits(base: str) -> str:
    """Return the two check digits for the first 9 digits of a CPF."""
    digits = [int(c) for c in base[:9]]
    for _ in range(2):
        weight = len(digits) + 1
        soma = sum(d * (weight - i) for i, d in enumerate(digits))
        resto = (soma * 10) % 11
        digits.append(0 if resto == 10 else resto)
    return f"{digits[9]}{digits[10]}"


def _mod11(digits: list[int]) -> int:
    """Mod-11 check digit, weights 2..9 cycling from the rightmost digit."""
    soma = 0
    peso = 2
    for d in reversed(digits):
        soma += d * peso
        peso = 2 if peso == 9 else peso + 1
    resto = soma % 11
    return 0 if resto < 2 else 11 - resto


def cnpj_check_digits(base: str) -> str:
    """Return the two check digits for the first 12 digits of a CNPJ."""
    digits = [int(c) for c in base[:12]]
    for _ in range(2):
        digits.append(_mod11(digits))
    return f"{digits[12]}{digits[13]}"


def chave_check_digit(base: str) -> int:
    """Check digit of an NF-e access key from its first 43 digits."""
    return _mod11([int(c) for c in base[:43]])


def gtin_check_digit(body: str) -> int:
    """GS1 check digit: weights 3,1,3,... from the rightmost data digit."""
    soma = sum(
        int(c) * (3 if i % 2 == 0 else 1)
        for i, c in enumerate(reversed(body))
    )
    return (10 - soma % 10) % 10


def validate_cpf(cpf: str) -> ValidationResult:
    digits = only_digits(cpf)
    if len(digits) != 11:
        return _fail("CPF deve ter 11 dígitos")
    if _repeated(digits) or cpf_check_digits(digits) != digits[9:]:
        return _fail("CPF inválido")
    return OK


def validate_cnpj(cnpj: str) -> ValidationResult:
    digits = only_digits(cnpj)
    if len(digits) != 14:
        return _fail("CNPJ deve ter 14 dígitos")
    if _repeated(digits) or cnpj_check_digits(digits) != digits[12:]:
        return _fail("CNPJ inválido")
    return OK


def validate_documento(documento: str) -> ValidationResult:
    """Validate a CPF or CNPJ, chosen by the number of digits."""
    digits = only_digits(documento)
    if len(digits) == 11:
        return validate_cpf(digits)
    if len(digits) == 14:
        return validate_cnpj(digits)
    return _fail("Documento deve ter 11 (CPF) ou 14 (CNPJ) dígitos")


def validate_cep(cep: str) -> ValidationResult:
    """Validate CEP: exactly 8 digits once separators are stripped."""
    if len(only_digits(cep)) != 8:
        return _fail("CEP deve ter 8 dígitos")
    return OK


def validate_ncm(ncm: str) -> ValidationResult:
    """Validate NCM: 8 digits, chapter between 01 and 97."""
    digits = only_digits(ncm)
    if len(digits) != 8:
        return _fail("NCM deve ter 8 dígitos")
    if not 1 <= int(digits[:2]) <= 97:
        return _fail("Capítulo NCM inválido (01-97)")
    return OK


def cfop_direction(cfop: str) -> tuple[str, str] | None:
    """Return (tipo, descricao) for a CFOP's leading digit, or None."""
    digits = only_digits(cfop)
    if not digits:
        return None
    return _CFOP_DIRECAO.get(digits[0])


def validate_cfop(cfop: str) -> ValidationResult:
    """Validate CFOP and describe the operation direction in ``aviso``."""
    digits = only_digits(cfop)
    if len(digits) != 4:
        return _fail("CFOP deve ter 4 dígitos")
    direcao = cfop_direction(digits)
    if direcao is None:
        return _fail("CFOP inválido - primeiro dígito deve ser 1, 2, 3, 5, 6 ou 7")
    tipo, descricao = direcao
    return ValidationResult(True, aviso=f"{tipo} - {descricao}")


def validate_email(email: str) -> ValidationResult:
    if not _EMAIL_RE.fullmatch(email or ""):
        return _fail("Email inválido")
    if len(email) > 254:
        return _fail("Email muito longo (máx. 254 caracteres)")
    return OK


def validate_telefone(telefone: str) -> ValidationResult:
    if len(only_digits(telefone)) not in (10, 11):
        return _fail("Telefone deve ter 10 ou 11 dígitos")
    return OK


def validate_uf(uf: str) -> ValidationResult:
    if (uf or "").strip().upper() not in ICMS_UF:
        return _fail(f"UF inválida: '{uf}'")
    return OK


def validate_gtin(gtin: str | None, obrigatorio: bool = True) -> ValidationResult:
    """Validate a GTIN-8/12/13/14.

    An empty value is an error when *obrigatorio* (item submission, mandatory
    since 2025) and accepted as "nothing to check" otherwise.
    """
    if not gtin or not gtin.strip():
        if obrigatorio:
            return _fail("GTIN é obrigatório a partir de 2025")
        return OK
    digits = only_digits(gtin)
    if len(digits) not in (8, 12, 13, 14):
        return _fail("GTIN deve ter 8, 12, 13 ou 14 dígitos")
    if gtin_check_digit(digits[:-1]) != int(digits[-1]):
        return _fail("GTIN inválido - dígito verificador incorreto")
    return OK


def validate_chave_acesso(chave: str | None) -> ValidationResult:
    """Validate a 44-digit NF-e access key (mod-11 check digit)."""
    digits = only_digits(chave)
    if len(digits) != 44:
        return _fail("Chave de acesso deve ter 44 dígitos")
    if chave_check_digit(digits) != int(digits[-1]):
        return _fail("Chave de acesso inválida - dígito verificador incorreto")
    return OK


def to_decimal(value: object) -> Decimal | None:
    """Convert an int/float/str/Decimal to Decimal; None if not numeric.

    Floats go through ``str`` so 10.005 stays 10.005 instead of its binary
    expansion.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        return Decimal(value if isinstance(value, (Decimal, int)) else str(value).strip())
    except InvalidOperation:
        return None


def decimal_places(d: Decimal) -> int:
    exponent = d.normalize().as_tuple().exponent
    return max(0, -exponent) if isinstance(exponent, int) else 0


def validate_valor(
    valor: object, campo: str = "Valor", obrigatorio: bool = True
) -> ValidationResult:
    """Validate a monetary amount: non-negative, 2 places, up to R$ 999.999.999,99.

    Zero is rejected only for required fields.
    """
    d = to_decimal(valor)
    if d is None or not d.is_finite() or d < 0:
        return _fail(f"{campo} deve ser um valor positivo")
    if d == 0 and obrigatorio:
        return _fail(f"{campo} deve ser maior que zero")
    if decimal_places(d) > 2:
        return _fail(f"{campo} deve ter no máximo 2 casas decimais")
    if d > VALOR_MAXIMO:
        return _fail(f"{campo} excede o valor máximo permitido")
    return OK


def validate_quantidade(quantidade: object) -> ValidationResult:
    d = to_decimal(quantidade)
    if d is None or not d.is_finite() or d <= 0:
        return _fail("Quantidade deve ser maior que zero")
    if decimal_places(d) > 4:
        return _fail("Quantidade deve ter no máximo 4 casas decimais")
    if d > QUANTIDADE_MAXIMA:
        return _fail("Quantidade excede o valor máximo permitido")
    return OK


def validate_totals(
    quantidade: object, valor_unitario: object, valor_total: object
) -> ValidationResult:
    """Check that valor_total matches quantidade x valor_unitario within R$ 0,01."""
    qtd = to_decimal(quantidade)
    unit = to_decimal(valor_unitario)
    total = to_decimal(valor_total)
    if qtd is None or unit is None or total is None:
        return _fail("Valores numéricos inválidos para conferência do total")
    if not (qtd.is_finite() and unit.is_finite() and total.is_finite()):
        return _fail("Valores numéricos inválidos para conferência do total")
    calculado = qtd * unit
    if abs(calculado - total) > TOLERANCIA_TOTAL:
        return _fail(
            "Valor total inconsistente. "
            f"Calculado: R$ {money(calculado)}, Informado: R$ {money(total)}"
        )
    return OK
