"""DeBank open API client.

DeBank token objects are already in the shape :func:`normalize.normalize`
reads, so the adapter only has to locate the list.

Configuration (settings.json -> "provider_options"):
- api_base:    Base URL, default "https://openapi.debank.com" (free tier)
- access_key:  Optional DeBank Cloud key, sent as the ``AccessKey`` header
- tries:       Attempts per request, retried on 5xx only (default 2)
"""

from __future__ import annotations

from typing import Any, Dict

import httpx

from providers.base import RawTokens, get_json, list_of_dicts

DEFAULT_BASE = "https://openapi.debank.com"
TOKEN_LIST_PATH = "/v1/user/token_list"


async def fetch_tokens(
    client: httpx.AsyncClient, cfg: Dict[str, Any], wallet: str, chain: str
) -> RawTokens:
    api_base = (cfg.get("api_base") or DEFAULT_BASE).rstrip("/")
    headers = {}
    if cfg.get("access_key"):
        headers["AccessKey"] = str(cfg["access_key"])
    data = await get_json(
        client,
        f"{api_base}{TOKEN_LIST_PATH}",
        params={"id": wallet, "chain_id": chain},
        headers=headers,
        tries=int(cfg.get("tries", 2)),
    )
    return list_of_dicts(data, keys=("data",))
