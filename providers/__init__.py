"""Pluggable token balance providers.

Each provider module exposes ``fetch_tokens(client, cfg, wallet, chain)``
returning raw token dicts in the DeBank shape, raising on any upstream
problem.  :func:`providers.base.fetch_result` wraps those calls so failures
end up as an empty, annotated :class:`models.FetchResult` instead.
"""

from __future__ import annotations

from providers import debank, moralis
from providers.base import TokenFetcher

ADAPTERS = {
    "debank": debank.fetch_tokens,
    "moralis": moralis.fetch_tokens,
}


def get_adapter(name: str) -> TokenFetcher:
    try:
        return ADAPTERS[(name or "debank").lower()]
    except KeyError:
        raise ValueError(f"unknown provider {name!r}; expected one of {sorted(ADAPTERS)}") from None
