from __future__ import annotations

import re
from decimal import Decimal


def strip_formatting(value: str) -> str:
    """Remove every non-digit character (dots, dashes, slashes, spaces)."""
    return re.sub(r"\D", "", value or "")


def _mask(value: str, length: int, pattern: str, template: str) -> str:
    digits = strip_formatting(value)
    if len(digits) != length:
        return value
    return re.sub(pattern, template, digits)


def format_cpf(cpf: str) -> str:
    """Format as 000.000.000-00; returns the input unchanged if not 11 digits."""
    return _mask(cpf, 11, r"(\d{3})(\d{3})(\d{3})(\d{2})", r"\1.\2.\3-\4")


def format_cnpj(cnpj: str) -> str:
    """Format as 00.000.000/0000-00; returns the input unchanged if not 14 digits."""
    return _mask(cnpj, 14, r"(\d{2})(\d{3})(\d{3})(\d{4})(\d{2})", r"\1.\2.\3/\4-\5")


def format_documento(documento: str) -> str:
    digits = strip_formatting(documento)
    if len(digits) == 11:
        return format_cpf(digits)
    if len(digits) == 14:
        return format_cnpj(digits)
    return documento


def format_cep(cep: str) -> str:
    return _mask(cep, 8, r"(\d{5})(\d{3})", r"\1-\2")


def format_ncm(ncm: str) -> str:
    return _mask(ncm, 8, r"(\d{4})(\d{4})", r"\1.\2")


def format_cfop(cfop: str) -> str:
    return _mask(cfop, 4, r"(\d)(\d{3})", r"\1.\2")


def format_telefone(telefone: str) -> str:
    digits = strip_formatting(telefone)
    if len(digits) == 10:
        return re.sub(r"(\d{2})(\d{4})(\d{4})", r"(\1) \2-\3", digits)
    if len(digits) == 11:
        return re.sub(r"(\d{2})(\d{5})(\d{4})", r"(\1) \2-\3", digits)
    return telefone


def format_brl(value: str | Decimal) -> str:
    """Format a numeric value as R$ X.XXX,XX."""
    d = Decimal(value)
    formatted = f"{d:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def format_percent(value: str | Decimal) -> str:
    """Format a percentage as 18,00%."""
    d = Decimal(value)
    return f"{d:.2f}".replace(".", ",") + "%"
