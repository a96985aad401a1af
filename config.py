"""Load the tracked wallets and chains from ``settings.json``.

The lookup order is the ``HOLDINGS_SETTINGS`` environment variable, then
``settings.json`` and finally ``settings.example.json`` next to this file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable

from models import DEFAULT_CHAINS, HoldingsConfig

BASE_DIR = Path(__file__).resolve().parent


def settings_path() -> Path:
    env = os.getenv("HOLDINGS_SETTINGS")
    if env:
        return Path(env)
    p = BASE_DIR / "settings.json"
    if not p.exists():
        p = BASE_DIR / "settings.example.json"
    return p


def _str_list(v: Any) -> tuple:
    if isinstance(v, str):
        v = v.split(",")
    if not isinstance(v, Iterable):
        return ()
    return tuple(s.strip() for s in (str(x) for x in v) if s.strip())


def config_from_dict(data: Dict[str, Any]) -> HoldingsConfig:
    chains = _str_list(data.get("chains")) or DEFAULT_CHAINS
    return HoldingsConfig(
        wallets=_str_list(data.get("wallets")),
        chains=tuple(c.lower() for c in chains),
        provider=str(data.get("provider") or "debank").lower(),
        provider_options=dict(data.get("provider_options") or {}),
        cache_ttl_sec=float(data.get("cache_ttl_sec", 60)),
        merge_by_chain=bool(data.get("merge_by_chain", False)),
    )


def load_config(path: str | Path | None = None) -> HoldingsConfig:
    p = Path(path) if path else settings_path()
    return config_from_dict(json.loads(p.read_text(encoding="utf-8")))
