from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

from tributario.models.regime import TaxRegime, regime_from_dict
from tributario.services.tables import MVA_PADRAO

APP_NAME = "tributario"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and the dir does not exist yet.
    """
    from_env = os.environ.get("TRIBUTARIO_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/tributario/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("TRIBUTARIO_CONFIG_DIR", "config")


def get_default_uf() -> str:
    """UF used when regime.yaml omits ``estado`` (TRIBUTARIO_UF, default SP)."""
    return os.environ.get("TRIBUTARIO_UF", "SP").strip().upper()


def get_default_mva() -> Decimal:
    """MVA used for substitution when none is given (TRIBUTARIO_MVA, default 30)."""
    raw = os.environ.get("TRIBUTARIO_MVA")
    if not raw:
        return MVA_PADRAO
    try:
        mva = Decimal(raw)
        if not mva.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"TRIBUTARIO_MVA invalido: '{raw}'") from None
    return mva


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text()) or {}


def regime_path() -> Path:
    return get_config_dir() / "regime.yaml"


def load_regime() -> TaxRegime:
    """Load the issuer's tax regime from config/regime.yaml.

    Missing ``estado``/``mva`` keys fall back to the environment defaults.
    """
    data = dict(load_yaml(regime_path()))
    data.setdefault("estado", get_default_uf())
    if str(data.get("tipo", "")).lower() == "substituicao":
        data.setdefault("mva", get_default_mva())
    return regime_from_dict(data)


def save_regime(data: dict) -> Path:
    """Save the regime configuration to config/regime.yaml (atomic write)."""
    path = regime_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(yaml.dump(data, default_flow_style=False, allow_unicode=True))
    os.replace(tmp, path)
    return path
