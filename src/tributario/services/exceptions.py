from __future__ import annotations

from typing import Any


class UnknownRegimeError(ValueError):
    """The regime is not one of the supported tax regimes."""

    def __init__(self, regime: Any) -> None:
        super().__init__(f"Regime tributário desconhecido: {regime!r}")
        self.regime = regime


class UnknownStateError(ValueError):
    """No ICMS rate is known for the given UF."""

    def __init__(self, estado: str) -> None:
        super().__init__(f"UF sem alíquota de ICMS cadastrada: '{estado}'")
        self.estado = estado


class ItemValidationError(ValueError):
    """A line item failed one or more field validations."""

    def __init__(self, results: list | None = None) -> None:
        self.results = results or []
        erros = [r.erro for r in self.results if r.erro]
        super().__init__("Erros de validação: " + ", ".join(erros))

    @property
    def erros(self) -> list[str]:
        return [r.erro for r in self.results if r.erro]


class DocumentValidationError(ValueError):
    """The assembled document is not ready for transmission."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
