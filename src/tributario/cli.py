from __future__ import annotations

import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

USAGE = """\
Uso:
  tributario init                         cria config/regime.yaml
  tributario calcular ITENS.yaml [--mva N] calcula os tributos da nota
"""

_REGIME_TEMPLATE = {
    "tipo": "presumido",
    "estado": "SP",
}

_COMPONENT_LABELS = {
    "icms": "ICMS",
    "pis": "PIS",
    "cofins": "COFINS",
    "ipi": "IPI",
    "ibs": "IBS",
    "cbs": "CBS",
    "imposto_seletivo": "IS",
    "outros": "Outros (DAS)",
}


def _init_config() -> None:
    """Write a template regime.yaml unless one already exists."""
    from tributario import config

    path = config.regime_path()
    if path.exists():
        print(f"Configuração já existe: {path}")
        return
    config.save_regime(_REGIME_TEMPLATE)
    print(f"Configuração criada: {path}")
    print("Edite 'tipo' (simples, presumido, real, substituicao, 2026) e 'estado'.")


def _parse_mva(args: list[str]) -> Decimal | None:
    if "--mva" not in args:
        return None
    idx = args.index("--mva")
    try:
        return Decimal(args[idx + 1])
    except (IndexError, InvalidOperation):
        raise ValueError("--mva requer um valor numérico") from None


def _print_item(item) -> None:
    from tributario.utils.formatters import format_brl, format_percent

    print(f"\n{item.codigo} - {item.descricao}")
    print(f"  {item.quantidade} {item.unidade} x {format_brl(item.valor_unitario)}"
          f" = {format_brl(item.valor_total)}")
    for name, comp in item.tributos.components():
        line = (
            f"  {_COMPONENT_LABELS[name]:<13} CST {comp.cst:<4}"
            f" {format_percent(comp.aliquota):>8} sobre {format_brl(comp.base_calculo)}"
            f" = {format_brl(comp.valor)}"
        )
        if comp.credito:
            line += f" (crédito {format_brl(comp.credito)})"
        print(line)
    print(f"  Total de tributos: {format_brl(item.tributos.total_tributos)}")


def _calcular(path: Path, mva: Decimal | None) -> int:
    from tributario import config
    from tributario.models.recipient import Recipient
    from tributario.models.regime import regime_label
    from tributario.services.document import build_item, prepare_document
    from tributario.services.exceptions import DocumentValidationError, ItemValidationError
    from tributario.utils.formatters import format_brl

    regime = config.load_regime()
    data = config.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: esperado um mapeamento com 'itens' e 'destinatario'")
    print(f"Regime: {regime_label(regime)}")

    items = []
    failed = False
    for n, raw in enumerate(data.get("itens") or [], start=1):
        if not isinstance(raw, dict):
            failed = True
            print(f"\nItem {n}:")
            print("  ERRO: item deve ser um mapeamento de campos (codigo, descricao, ...)")
            continue
        try:
            items.append(build_item(raw, regime, mva=mva))
        except ItemValidationError as e:
            failed = True
            print(f"\nItem {n} ({raw.get('codigo', '?')}):")
            for erro in e.erros:
                print(f"  ERRO: {erro}")
    if failed:
        return 1

    try:
        doc = prepare_document(
            natureza_operacao=str(data.get("natureza_operacao", "")),
            recipient=Recipient.from_dict(data.get("destinatario") or {}),
            regime=regime,
            items=items,
            observacoes=data.get("observacoes"),
        )
    except DocumentValidationError as e:
        for erro in e.errors:
            print(f"ERRO: {erro}")
        return 1

    for aviso in doc.avisos:
        print(f"AVISO: {aviso}")

    for item in doc.items:
        _print_item(item)

    t = doc.totals
    print("\nTotais da nota")
    print(f"  Itens:          {t.quantidade_itens}")
    print(f"  Produtos:       {format_brl(t.valor_produtos)}")
    for name, label in _COMPONENT_LABELS.items():
        value = getattr(t, name)
        if value:
            print(f"  {label + ':':<15} {format_brl(value)}")
    if t.creditos:
        print(f"  Créditos:       {format_brl(t.creditos)}")
    print(f"  Tributos:       {format_brl(t.total_tributos)}")

    print("\nInformações complementares")
    for line in doc.observacoes:
        print(f"  {line}" if line else "")
    return 0


def main() -> None:
    """Entry point for the tributario CLI."""
    args = sys.argv[1:]
    if not args or args[0] in ("-h", "--help"):
        print(USAGE)
        return

    if args[0] == "init":
        _init_config()
        return

    if args[0] == "calcular" and len(args) >= 2:
        path = Path(args[1])
        if not path.is_file():
            print(f"Arquivo não encontrado: {path}")
            sys.exit(1)
        try:
            mva = _parse_mva(args[2:])
            code = _calcular(path, mva)
        except FileNotFoundError as e:
            print(f"Configuração não encontrada: {e.filename}")
            print("Execute: tributario init")
            sys.exit(1)
        except ValueError as e:
            print(f"ERRO: {e}")
            sys.exit(1)
        if code:
            sys.exit(code)
        return

    print(USAGE)
    sys.exit(2)


if __name__ == "__main__":
    main()
