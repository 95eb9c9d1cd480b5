from __future__ import annotations

import random
from decimal import Decimal

import pytest

from tributario.utils.formatters import (
    format_brl,
    format_cep,
    format_cfop,
    format_cnpj,
    format_cpf,
    format_documento,
    format_ncm,
    format_percent,
    format_telefone,
    strip_formatting,
)


class TestFormatBrl:
    def test_simple(self):
        assert format_brl("1000") == "R$ 1.000,00"

    def test_with_decimals(self):
        assert format_brl("19684.93") == "R$ 19.684,93"

    def test_decimal_input(self):
        assert format_brl(Decimal("216.5")) == "R$ 216,50"

    def test_zero(self):
        assert format_brl("0") == "R$ 0,00"

    def test_large(self):
        assert format_brl("1234567.89") == "R$ 1.234.567,89"


class TestFormatPercent:
    def test_integer(self):
        assert format_percent(Decimal("18")) == "18,00%"

    def test_fraction(self):
        assert format_percent(Decimal("1.36")) == "1,36%"


class TestDocumentMasks:
    def test_cpf(self):
        assert format_cpf("52998224725") == "529.982.247-25"

    def test_cnpj(self):
        assert format_cnpj("11222333000181") == "11.222.333/0001-81"

    def test_cnpj_already_formatted(self):
        assert format_cnpj("11.222.333/0001-81") == "11.222.333/0001-81"

    def test_cnpj_reformats_odd_punctuation(self):
        assert format_cnpj("11 222 333 0001 81") == "11.222.333/0001-81"

    def test_wrong_length_unchanged(self):
        assert format_cpf("1234") == "1234"

    def test_documento_auto(self):
        assert format_documento("52998224725") == "529.982.247-25"
        assert format_documento("11222333000181") == "11.222.333/0001-81"
        assert format_documento("123") == "123"

    @pytest.mark.parametrize("seed", range(20))
    def test_cnpj_round_trip(self, seed):
        rng = random.Random(seed)
        digits = "".join(str(rng.randint(0, 9)) for _ in range(14))
        assert strip_formatting(format_cnpj(digits)) == digits


class TestCodeMasks:
    def test_cep(self):
        assert format_cep("01310100") == "01310-100"

    def test_cep_idempotent(self):
        assert format_cep("01310-100") == "01310-100"

    def test_ncm(self):
        assert format_ncm("61091000") == "6109.1000"

    @pytest.mark.parametrize("formatted", ["6109.1000", "6109.10.00", "61.09.10.00"])
    def test_ncm_idempotent(self, formatted):
        assert format_ncm(formatted) == format_ncm("61091000")

    def test_ncm_wrong_length_unchanged(self):
        assert format_ncm("6109") == "6109"

    def test_cfop(self):
        assert format_cfop("5102") == "5.102"

    def test_cfop_idempotent(self):
        assert format_cfop("5.102") == "5.102"


class TestFormatTelefone:
    def test_mobile(self):
        assert format_telefone("11987654321") == "(11) 98765-4321"

    def test_landline(self):
        assert format_telefone("1133334444") == "(11) 3333-4444"

    def test_other_unchanged(self):
        assert format_telefone("123") == "123"


class TestStripFormatting:
    def test_strips_everything(self):
        assert strip_formatting("11.222.333/0001-81") == "11222333000181"

    def test_empty(self):
        assert strip_formatting("") == ""
