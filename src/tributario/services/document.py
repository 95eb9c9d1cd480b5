"""Line-item assembly, totals aggregation and the document pre-flight check.

The result is a PreparedDocument handed to the transmission layer, which
owns XML serialization, signing and delivery.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from tributario.models.item import LineItem
from tributario.models.recipient import Recipient
from tributario.models.regime import TaxRegime
from tributario.models.taxes import COMPONENT_NAMES, ZERO, TaxBreakdown, money
from tributario.services.calculator import calculate_taxes
from tributario.services.exceptions import DocumentValidationError, ItemValidationError
from tributario.services.legal_notes import legal_notes
from tributario.utils.formatters import format_brl, strip_formatting
from tributario.utils.validators import (
    ValidationResult,
    validate_cep,
    validate_cfop,
    validate_documento,
    validate_email,
    validate_gtin,
    validate_ncm,
    validate_quantidade,
    validate_totals,
    validate_uf,
    validate_valor,
)

logger = logging.getLogger(__name__)

MAX_ITENS = 990
NOME_MAX = 60
CODIGO_MAX = 60
DESCRICAO_MAX = 120
AVISO_VALOR_TOTAL = Decimal("100000")
AVISO_ITENS = 100
AVISO_OBSERVACOES = 5000


def _blank(value: object) -> bool:
    return value is None or not str(value).strip()


def _decimal(value: object) -> Decimal:
    return Decimal(str(value).strip())


def check_item_fields(data: dict) -> list[ValidationResult]:
    """Mandatory 2025 checks: GTIN (Lei 14.592/2023), NCM and CFOP.

    Returns one result per field, in that order.
    """
    results = []
    if _blank(data.get("gtin")):
        results.append(ValidationResult(
            False, erro="GTIN é obrigatório a partir de 2025 (Lei 14.592/2023)"
        ))
    else:
        results.append(validate_gtin(str(data["gtin"]), obrigatorio=True))

    if _blank(data.get("ncm")):
        results.append(ValidationResult(False, erro="NCM é obrigatório"))
    else:
        results.append(validate_ncm(str(data["ncm"])))

    if _blank(data.get("cfop")):
        results.append(ValidationResult(False, erro="CFOP é obrigatório"))
    else:
        results.append(validate_cfop(str(data["cfop"])))
    return results


def check_reform_fields(tributos: TaxBreakdown) -> list[ValidationResult]:
    """Notice when IBS/CBS/IS are present (optional in 2025, mandatory in 2026)."""
    if tributos.ibs is None and tributos.cbs is None and tributos.imposto_seletivo is None:
        return []
    return [ValidationResult(
        True,
        aviso="Campos IBS/CBS/IS detectados - Sistema preparado para Reforma Tributária 2026",
    )]


def build_item(
    data: dict,
    regime: TaxRegime,
    *,
    mva: Decimal | None = None,
) -> LineItem:
    """Validate raw item fields and compute the item's taxes.

    ``valor_total`` is derived from quantidade x valor_unitario when absent.
    Raises ItemValidationError listing every failed check.
    """
    failures: list[ValidationResult] = []
    if _blank(data.get("codigo")):
        failures.append(ValidationResult(False, erro="Código do produto é obrigatório"))
    if _blank(data.get("descricao")):
        failures.append(ValidationResult(False, erro="Descrição do produto é obrigatória"))

    checks = [
        validate_quantidade(data.get("quantidade")),
        validate_valor(data.get("valor_unitario"), "Valor unitário"),
        *check_item_fields(data),
    ]
    failures.extend(r for r in checks if not r.valido)
    if failures:
        raise ItemValidationError(failures)

    quantidade = _decimal(data["quantidade"])
    valor_unitario = _decimal(data["valor_unitario"])

    if _blank(data.get("valor_total")):
        valor_total = money(quantidade * valor_unitario)
    else:
        checks = [
            validate_valor(data["valor_total"], "Valor total"),
            validate_totals(quantidade, valor_unitario, data["valor_total"]),
        ]
        failures = [r for r in checks if not r.valido]
        if failures:
            raise ItemValidationError(failures)
        valor_total = money(_decimal(data["valor_total"]))

    ncm = strip_formatting(str(data["ncm"]))
    tributos = calculate_taxes(valor_total, regime, ncm, mva)
    for aviso in check_reform_fields(tributos):
        logger.debug("Item %s: %s", data["codigo"], aviso.aviso)

    return LineItem(
        codigo=str(data["codigo"]).strip(),
        descricao=str(data["descricao"]).strip(),
        ncm=ncm,
        cfop=strip_formatting(str(data["cfop"])),
        gtin=strip_formatting(str(data["gtin"])),
        quantidade=quantidade,
        valor_unitario=valor_unitario,
        valor_total=valor_total,
        tributos=tributos,
        unidade=str(data.get("unidade") or "UN"),
    )


@dataclass(frozen=True)
class DocumentTotals:
    valor_produtos: Decimal = ZERO
    icms: Decimal = ZERO
    pis: Decimal = ZERO
    cofins: Decimal = ZERO
    ipi: Decimal = ZERO
    ibs: Decimal = ZERO
    cbs: Decimal = ZERO
    imposto_seletivo: Decimal = ZERO
    outros: Decimal = ZERO
    creditos: Decimal = ZERO
    total_tributos: Decimal = ZERO
    quantidade_itens: int = 0


def summarize(items: Iterable[LineItem]) -> DocumentTotals:
    """Aggregate product values and taxes across line items."""
    sums: dict[str, Decimal] = {name: ZERO for name in COMPONENT_NAMES}
    valor_produtos = ZERO
    creditos = ZERO
    total_tributos = ZERO
    count = 0
    for item in items:
        count += 1
        valor_produtos += item.valor_total
        for name, comp in item.tributos.components():
            sums[name] += comp.valor
        creditos += item.tributos.total_creditos
        total_tributos += item.tributos.total_tributos
    return DocumentTotals(
        valor_produtos=money(valor_produtos),
        creditos=money(creditos),
        total_tributos=money(total_tributos),
        quantidade_itens=count,
        **{name: money(value) for name, value in sums.items()},
    )


def _check_recipient(recipient: Recipient | None) -> list[str]:
    erros = []
    nome = "" if recipient is None else (recipient.nome or "").strip()
    if not nome:
        erros.append("Nome do destinatário é obrigatório")
    elif len(nome) < 2:
        erros.append("Nome do destinatário deve ter no mínimo 2 caracteres")
    elif len(nome) > NOME_MAX:
        erros.append(f"Nome do destinatário deve ter no máximo {NOME_MAX} caracteres")

    if recipient is None or _blank(recipient.documento):
        erros.append("Documento do destinatário é obrigatório")
        return erros

    # optional fields are checked only when present
    checks = [validate_documento(recipient.documento)]
    if not _blank(recipient.email):
        checks.append(validate_email(recipient.email.strip()))
    if not _blank(recipient.cep):
        checks.append(validate_cep(recipient.cep))
    if not _blank(recipient.uf):
        checks.append(validate_uf(recipient.uf))
    erros.extend(f"Destinatário: {r.erro}" for r in checks if not r.valido)
    return erros


def check_document(
    natureza_operacao: str,
    recipient: Recipient | None,
    items: list[LineItem],
) -> list[str]:
    """Pre-flight checks before the document is handed off. Returns error messages."""
    erros = []
    if _blank(natureza_operacao):
        erros.append("Natureza da operação é obrigatória")
    erros.extend(_check_recipient(recipient))
    if not items:
        erros.append("Pelo menos um item deve ser adicionado")
    elif len(items) > MAX_ITENS:
        erros.append(f"Máximo de {MAX_ITENS} itens permitidos")
    for n, item in enumerate(items, start=1):
        if len(item.codigo) > CODIGO_MAX:
            erros.append(
                f"Item {n}: Código do produto deve ter no máximo {CODIGO_MAX} caracteres"
            )
        if len(item.descricao) > DESCRICAO_MAX:
            erros.append(f"Item {n}: Descrição deve ter no máximo {DESCRICAO_MAX} caracteres")
    sem_gtin = sum(1 for item in items if not item.gtin)
    if sem_gtin:
        erros.append(f"{sem_gtin} item(ns) sem GTIN (obrigatório desde 2025)")
    return erros


def document_warnings(items: list[LineItem], observacoes: str = "") -> list[str]:
    """Non-blocking notices about an otherwise valid document."""
    avisos = []
    total = sum((item.valor_total for item in items), ZERO)
    if total > AVISO_VALOR_TOTAL:
        avisos.append(f"Valor total alto: {format_brl(total)}")
    if len(items) > AVISO_ITENS:
        avisos.append(f"Muitos itens na NF-e: {len(items)} itens")
    if len(observacoes) > AVISO_OBSERVACOES:
        avisos.append("Observações muito longas podem causar problemas na transmissão")
    return avisos


@dataclass
class PreparedDocument:
    """All data the transmission layer needs for one NF-e."""

    natureza_operacao: str
    recipient: Recipient
    regime: TaxRegime
    items: list[LineItem]
    totals: DocumentTotals
    observacoes: list[str] = field(default_factory=list)
    avisos: list[str] = field(default_factory=list)


def prepare_document(
    natureza_operacao: str,
    recipient: Recipient,
    regime: TaxRegime,
    items: list[LineItem],
    observacoes: str | None = None,
) -> PreparedDocument:
    """Aggregate totals and legal notes for a validated set of items.

    Raises DocumentValidationError if the pre-flight check fails. Warnings
    that do not block the document are returned in ``avisos``.
    """
    erros = check_document(natureza_operacao, recipient, items)
    if erros:
        raise DocumentValidationError(erros)

    notes = legal_notes(regime)
    if observacoes and observacoes.strip():
        notes.append(observacoes.strip())

    avisos = document_warnings(items, "\n".join(notes))
    for aviso in avisos:
        logger.warning("Document warning: %s", aviso)

    totals = summarize(items)
    logger.info(
        "Document prepared: %d item(s), produtos=%s, tributos=%s",
        totals.quantidade_itens,
        totals.valor_produtos,
        totals.total_tributos,
    )
    return PreparedDocument(
        natureza_operacao=natureza_operacao.strip(),
        recipient=recipient,
        regime=regime,
        items=list(items),
        totals=totals,
        observacoes=notes,
        avisos=avisos,
    )
