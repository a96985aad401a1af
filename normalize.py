"""Convert raw provider token objects into :class:`NormalizedHolding` rows.

Providers disagree on which fields they send and what type they send them
as, so every read here is defensive: missing numbers become ``0``, missing
strings become ``""`` and missing optional fields become ``None``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from aggregate import to_float, value_usd
from models import NormalizedHolding

# first non-empty wins
SYMBOL_FIELDS = ("optimized_symbol", "display_symbol", "symbol")


def _to_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_str(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


def resolve_symbol(raw: Dict[str, Any]) -> str:
    for k in SYMBOL_FIELDS:
        v = raw.get(k)
        if isinstance(v, str) and v:
            return v
    return ""


def normalize(raw: Dict[str, Any], wallet: str, chain: str) -> NormalizedHolding:
    """Return the canonical holding for one raw token of ``wallet`` on ``chain``."""

    if not isinstance(raw, dict):
        raw = {}
    price = max(to_float(raw.get("price")), 0.0)
    amount = to_float(raw.get("amount"))
    logo = raw.get("logo_url")
    return NormalizedHolding(
        wallet=wallet,
        chain=chain,
        token_id=_to_str(raw.get("id")),
        symbol=resolve_symbol(raw),
        name=_to_str(raw.get("name")),
        decimals=_to_int(raw.get("decimals")),
        price_usd=price,
        amount=amount,
        value_usd=value_usd(price, amount),
        is_core=bool(raw.get("is_core")),
        is_verified=bool(raw.get("is_verified")),
        logo_url=logo if isinstance(logo, str) and logo else None,
        chains=(chain,),
    )
