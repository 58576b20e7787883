# config.py
# Parâmetros globais e overrides por variável de ambiente.
from __future__ import annotations

import json
import logging
import os
from dataclasses import fields
from pathlib import Path

from domain import RateTable

logger = logging.getLogger(__name__)

APP_TITLE = "Holerite - Prestador de Serviço"
PROFIT_TITLE = "Relatório de Lucro - LOGSERV"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return os.access(path, os.W_OK)


def _pick_data_dir() -> Path:
    """First writable of DATA_DIR, /data and ./data; falls back to the cwd."""
    preferred = [os.getenv("DATA_DIR"), "/data", Path.cwd() / "data"]
    return next((Path(p) for p in preferred if p and _writable(Path(p))), Path.cwd())


DATA_DIR = _pick_data_dir()
DEFAULT_SQLITE = f"sqlite:///{(DATA_DIR / 'holerite.db').as_posix()}"
DB_URL = os.getenv("DATABASE_URL", DEFAULT_SQLITE)
RATES_FILE = os.getenv("RATES_FILE")

_RATE_KEYS = {f.name for f in fields(RateTable)}


def load_rate_table(path: str | Path | None = None) -> RateTable:
    """Builds a fresh RateTable, overriding defaults with a JSON file if given.

    The file holds a flat object whose keys are RateTable field names, e.g.
    ``{"overtime_rate": 22, "provider_daily_rates": {"normal": 105}}``. Role
    maps replace the default map entirely.
    """
    path = path or RATES_FILE
    if not path:
        return RateTable()

    with open(path, encoding="utf-8") as fh:
        overrides = json.load(fh)
    if not isinstance(overrides, dict):
        raise ValueError(f"rates file must contain a JSON object: {path}")
    unknown = set(overrides) - _RATE_KEYS
    if unknown:
        raise ValueError(f"unknown rate keys in {path}: {sorted(unknown)}")

    logger.info("loaded rate overrides from %s: %s", path, sorted(overrides))
    return RateTable(**overrides)
