"""FastAPI application serving aggregated wallet holdings.

``GET /holdings`` fetches token balances for the configured wallets and
chains (``settings.json``, falling back to ``settings.example.json``) and
returns per-wallet snapshots together with the cross-wallet portfolio
topline.  Results are memoised for ``cache_ttl_sec`` seconds.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Any, Dict, List

from cachetools import TTLCache
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, RedirectResponse

from config import load_config
from holdings import build_holdings
from models import HoldingsConfig, HoldingsReport
from providers.base import TokenFetcher

logger = logging.getLogger(__name__)

app = FastAPI()

# Overridable for tests and alternative deployments
FETCHER: TokenFetcher | None = None
CACHE: TTLCache | None = None
CACHE_SIZE = 64


def _config() -> HoldingsConfig:
    return load_config()


def _cache(ttl: float) -> TTLCache | None:
    """Return the shared report cache, or ``None`` when ``ttl`` disables it."""

    global CACHE
    if ttl <= 0:
        return None
    if CACHE is None or CACHE.ttl != ttl:
        CACHE = TTLCache(maxsize=CACHE_SIZE, ttl=ttl)
    return CACHE


def _split(values: List[str] | None) -> tuple:
    out: List[str] = []
    for v in values or []:
        out.extend(s.strip() for s in v.split(",") if s.strip())
    return tuple(out)


async def _report(cfg: HoldingsConfig) -> HoldingsReport:
    cache = _cache(cfg.cache_ttl_sec)
    key = cfg.cache_key()
    hit = cache.get(key) if cache is not None else None
    if hit is not None:
        return hit
    report = await build_holdings(cfg, fetch=FETCHER)
    if cache is not None:
        cache[key] = report
    return report


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


@app.get("/holdings")
async def holdings(
    wallets: List[str] | None = Query(None),
    chains: List[str] | None = Query(None),
    raw: bool = True,
) -> Any:
    """Return all wallets, their per-chain totals and the merged topline.

    ``wallets`` and ``chains`` may be repeated or comma separated and
    override the configured lists.  ``raw=false`` drops the provider's raw
    token objects from the chain summaries.
    """

    try:
        cfg = _config()
        if _split(wallets):
            cfg = replace(cfg, wallets=_split(wallets))
        if _split(chains):
            cfg = replace(cfg, chains=tuple(c.lower() for c in _split(chains)))
        report = await _report(cfg)
        return report.to_dict(include_raw=raw)
    except Exception:
        logger.exception("failed to build holdings")
        return JSONResponse({"error": "failed_to_build_holdings"}, status_code=500)


@app.get("/")
def index() -> RedirectResponse:
    return RedirectResponse("/holdings", status_code=302)


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
