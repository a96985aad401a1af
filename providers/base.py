"""Shared plumbing for the token providers.

:func:`get_json` performs a GET and retries only on 5xx answers.
:func:`fetch_result` wraps a provider call so that any failure is logged and
returned as an empty :class:`models.FetchResult` carrying the reason.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List

import httpx

from models import FetchResult

logger = logging.getLogger(__name__)

RawTokens = List[Dict[str, Any]]
TokenFetcher = Callable[[httpx.AsyncClient, Dict[str, Any], str, str], Awaitable[RawTokens]]


class ProviderError(Exception):
    """Upstream returned something we cannot use."""


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Dict[str, Any] | None = None,
    headers: Dict[str, str] | None = None,
    tries: int = 2,
) -> Any:
    """GET ``url`` and decode JSON, retrying only on 5xx responses."""

    hdrs = {"accept": "application/json", **(headers or {})}
    tries = max(1, int(tries))
    for attempt in range(tries):
        resp = await client.get(url, params=params, headers=hdrs)
        if resp.is_success:
            try:
                return resp.json()
            except ValueError as exc:
                raise ProviderError(f"invalid JSON from {url}: {exc}") from exc
        if not resp.is_server_error or attempt == tries - 1:
            raise ProviderError(f"HTTP {resp.status_code} {resp.text[:200]}")


def list_of_dicts(data: Any, keys: tuple = ("data", "result")) -> RawTokens:
    """Return the token list from ``data``, which may be bare or wrapped."""

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = None
        for k in keys:
            v = data.get(k)
            if isinstance(v, list):
                items = v
                break
        if items is None:
            raise ProviderError(f"no token list in payload keys {sorted(data)[:10]}")
    else:
        raise ProviderError(f"unexpected payload type {type(data).__name__}")
    return [it for it in items if isinstance(it, dict)]


async def fetch_result(
    fetch: TokenFetcher,
    client: httpx.AsyncClient,
    cfg: Dict[str, Any],
    wallet: str,
    chain: str,
) -> FetchResult:
    """Run ``fetch`` for one (wallet, chain) pair without ever raising.

    Any failure is logged and recorded on the returned result so one bad
    chain cannot take the others down with it.
    """

    try:
        tokens = await fetch(client, cfg, wallet, chain)
    except Exception as exc:
        msg = f"{type(exc).__name__}: {exc}"
        logger.warning("token_list failed chain=%s wallet=%s: %s", chain, wallet, msg)
        return FetchResult(wallet=wallet, chain=chain, error=msg)
    return FetchResult(wallet=wallet, chain=chain, tokens=list(tokens))
