from __future__ import annotations

import random

import pytest
import yaml

from tributario.models.recipient import Recipient
from tributario.models.regime import (
    LucroPresumido,
    LucroReal,
    Preparacao2026,
    SimplesNacional,
    SubstituicaoTributaria,
)
from tributario.utils.validators import cnpj_check_digits, cpf_check_digits, gtin_check_digit


def make_cpf(rng: random.Random) -> str:
    """Build a valid CPF by computing check digits for a random base."""
    while True:
        base = "".join(str(rng.randint(0, 9)) for _ in range(9))
        if len(set(base)) > 1:
            return base + cpf_check_digits(base)


def make_cnpj(rng: random.Random) -> str:
    while True:
        base = "".join(str(rng.randint(0, 9)) for _ in range(8)) + "0001"
        if len(set(base)) > 1:
            return base + cnpj_check_digits(base)


def make_gtin13(rng: random.Random) -> str:
    body = "789" + "".join(str(rng.randint(0, 9)) for _ in range(9))
    return body + str(gtin_check_digit(body))


VALID_CPFS = [make_cpf(random.Random(seed)) for seed in range(25)]
VALID_CNPJS = [make_cnpj(random.Random(seed)) for seed in range(25)]
VALID_GTIN13 = [make_gtin13(random.Random(seed)) for seed in range(25)]


# --- Regime fixtures ---


@pytest.fixture
def simples() -> SimplesNacional:
    return SimplesNacional(anexo="I", faixa_receita=0)


@pytest.fixture
def presumido() -> LucroPresumido:
    return LucroPresumido(estado="SP")


@pytest.fixture
def real() -> LucroReal:
    return LucroReal(estado="SP", tem_credito=True)


@pytest.fixture
def substituicao() -> SubstituicaoTributaria:
    return SubstituicaoTributaria(estado="SP", mva=30)


@pytest.fixture
def reforma() -> Preparacao2026:
    return Preparacao2026(tem_credito=True)


# --- Item fixtures ---


@pytest.fixture
def item_dict() -> dict:
    return {
        "codigo": "P001",
        "descricao": "Camiseta de malha",
        "ncm": "6109.1000",
        "cfop": "5102",
        "gtin": "7891000315507",
        "quantidade": 3,
        "valor_unitario": "10.00",
        "valor_total": "30.00",
    }


@pytest.fixture
def tobacco_item_dict() -> dict:
    return {
        "codigo": "C010",
        "descricao": "Cigarros",
        "ncm": "24022000",
        "cfop": "5102",
        "gtin": "4006381333931",
        "quantidade": "2",
        "valor_unitario": "50.00",
    }


@pytest.fixture
def recipient() -> Recipient:
    return Recipient(nome="Cliente Exemplo Ltda", documento="11.222.333/0001-81")


# --- Config dir fixture ---


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "regime.yaml").write_text(yaml.dump({"tipo": "presumido", "estado": "SP"}))
    monkeypatch.setenv("TRIBUTARIO_CONFIG_DIR", str(cfg))
    return cfg
