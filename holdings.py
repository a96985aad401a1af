"""Build the multi-wallet, multi-chain holdings report.

The main entry point is :func:`build_holdings` which fetches the raw token
lists for every configured (wallet, chain) pair concurrently and hands them
to :func:`assemble_holdings`.  The latter is a plain synchronous reduction:
normalise, value, sum per chain, merge per wallet and finally merge across
wallets into the portfolio topline.

Network failures never reach this level.  Each pair that could not be
fetched simply contributes an empty chain summary.
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict, Iterable, List, Sequence, Tuple

import httpx

from aggregate import aggregate_chain, aggregate_wallet, merge_portfolio
from models import FetchResult, HoldingsConfig, HoldingsReport, NormalizedHolding
from normalize import normalize
from providers import get_adapter
from providers.base import TokenFetcher, fetch_result


def _utc_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def assemble_holdings(
    wallets: Sequence[str],
    chains: Sequence[str],
    results: Iterable[FetchResult],
    merge_by_chain: bool = False,
    updated_at: str | None = None,
) -> HoldingsReport:
    """Reduce fetched token lists into a :class:`HoldingsReport`.

    Output order follows ``wallets`` and ``chains``, never the order in which
    ``results`` arrive.  Pairs without a result count as empty.
    """

    by_pair: Dict[Tuple[str, str], FetchResult] = {(r.wallet, r.chain): r for r in results}

    snapshots = []
    for wallet in wallets:
        summaries = []
        flat: List[NormalizedHolding] = []
        for chain in chains:
            res = by_pair.get((wallet, chain))
            raw = res.tokens if res is not None else []
            rows = [normalize(t, wallet, chain) for t in raw]
            summaries.append(aggregate_chain(chain, rows, raw))
            flat.extend(rows)
        snapshots.append(aggregate_wallet(wallet, summaries, flat, by_chain=merge_by_chain))

    return HoldingsReport(
        updated_at=updated_at or _utc_now(),
        wallets=snapshots,
        portfolio_topline=merge_portfolio(snapshots, by_chain=merge_by_chain),
    )


async def fetch_all(
    config: HoldingsConfig,
    fetch: TokenFetcher | None = None,
    client: httpx.AsyncClient | None = None,
) -> List[FetchResult]:
    """Fetch every (wallet, chain) pair of ``config`` concurrently."""

    fetch = fetch or get_adapter(config.provider)
    opts = config.provider_options
    pairs = [(w, c) for w in config.wallets for c in config.chains]

    async def _run(cl: httpx.AsyncClient) -> List[FetchResult]:
        return list(
            await asyncio.gather(*(fetch_result(fetch, cl, opts, w, c) for w, c in pairs))
        )

    if client is not None:
        return await _run(client)
    async with httpx.AsyncClient(timeout=float(opts.get("timeout", 15))) as cl:
        return await _run(cl)


async def build_holdings(
    config: HoldingsConfig,
    fetch: TokenFetcher | None = None,
    client: httpx.AsyncClient | None = None,
) -> HoldingsReport:
    """Fetch and aggregate holdings for every wallet and chain in ``config``."""

    results = await fetch_all(config, fetch=fetch, client=client)
    return assemble_holdings(
        config.wallets, config.chains, results, merge_by_chain=config.merge_by_chain
    )
