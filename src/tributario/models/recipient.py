from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Recipient:
    """Destinatário da NF-e (pessoa física ou jurídica)."""

    nome: str
    documento: str  # CPF ou CNPJ, com ou sem pontuação
    email: str | None = None
    cep: str | None = None
    uf: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Recipient:
        """Create a Recipient from a YAML-loaded dict, applying defaults for optional fields."""
        uf = d.get("uf")
        return cls(
            nome=str(d.get("nome", "")),
            documento=str(d.get("documento", "")),
            email=d.get("email"),
            cep=str(d["cep"]) if d.get("cep") is not None else None,
            uf=str(uf).upper() if uf else None,
        )
