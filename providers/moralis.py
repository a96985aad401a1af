"""Moralis wallet token API client.

Moralis uses its own field names and chain slugs.  Each item is translated
here into the DeBank-style raw token so the shared normaliser never needs to
know which provider answered.

Configuration (settings.json -> "provider_options"):
- api_key:   Moralis key; falls back to the ``MORALIS_API_KEY`` env var
- api_base:  Base URL, default "https://deep-index.moralis.io/api/v2.2"
- tries:     Attempts per request, retried on 5xx only (default 2)
"""

from __future__ import annotations

import os
from typing import Any, Dict

import httpx

from providers.base import ProviderError, RawTokens, get_json, list_of_dicts

DEFAULT_BASE = "https://deep-index.moralis.io/api/v2.2"

CHAIN_SLUGS = {
    "eth": "eth",
    "bsc": "bsc",
    "matic": "polygon",
    "arb": "arbitrum",
    "op": "optimism",
    "avax": "avalanche",
    "ftm": "fantom",
    "base": "base",
}


def _amount(item: Dict[str, Any]) -> Any:
    if item.get("balance_formatted") is not None:
        return item["balance_formatted"]
    try:
        return float(item.get("balance", 0)) / 10.0 ** int(item.get("decimals") or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def to_raw(item: Dict[str, Any], chain: str) -> Dict[str, Any]:
    """Map one Moralis token onto the canonical raw token keys."""

    native = bool(item.get("native_token"))
    return {
        "id": chain if native else item.get("token_address"),
        "symbol": item.get("symbol"),
        "name": item.get("name"),
        "decimals": item.get("decimals"),
        "price": item.get("usd_price"),
        "amount": _amount(item),
        "logo_url": item.get("logo") or item.get("thumbnail"),
        "is_core": native,
        "is_verified": bool(item.get("verified_contract")),
    }


async def fetch_tokens(
    client: httpx.AsyncClient, cfg: Dict[str, Any], wallet: str, chain: str
) -> RawTokens:
    api_key = cfg.get("api_key") or os.getenv("MORALIS_API_KEY")
    if not api_key:
        raise ProviderError("moralis api_key is required")
    api_base = (cfg.get("api_base") or DEFAULT_BASE).rstrip("/")
    data = await get_json(
        client,
        f"{api_base}/wallets/{wallet}/tokens",
        params={"chain": CHAIN_SLUGS.get(chain, chain)},
        headers={"x-api-key": api_key},
        tries=int(cfg.get("tries", 2)),
    )
    return [to_raw(it, chain) for it in list_of_dicts(data, keys=("result",))]
