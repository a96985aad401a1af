"""Valuation and merging of normalised holdings.

Everything in this module is pure: it works on already fetched data, never
mutates its inputs and never talks to the network.  Results only depend on
the order of the inputs, not on when their fetches finished.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, Hashable, Iterable, List, Sequence

from models import ChainSummary, NormalizedHolding, ToplineRow, WalletSnapshot


def to_float(v: Any) -> float:
    """Coerce ``v`` to a finite float, returning ``0.0`` when impossible."""

    if v is None or isinstance(v, bool):
        return 0.0
    try:
        f = float(v)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return f if math.isfinite(f) else 0.0


def value_usd(price_usd: Any, amount: Any) -> float:
    """Return ``price_usd * amount``.

    Zero, negative or missing prices and zero amounts yield ``0`` so a junk
    quote can never drag a total below zero.
    """

    px = to_float(price_usd)
    amt = to_float(amount)
    if px > 0 and amt != 0:
        v = px * amt
        return v if math.isfinite(v) else 0.0
    return 0.0


def aggregate_chain(
    chain: str,
    holdings: Sequence[NormalizedHolding],
    raw_tokens: Iterable[Dict[str, Any]] | None = None,
) -> ChainSummary:
    """Sum the holdings of one (wallet, chain) pair.

    Zero value tokens still count towards ``token_count``.
    """

    total = 0.0
    for h in holdings:
        total += h.value_usd
    return ChainSummary(
        chain=chain,
        token_count=len(holdings),
        usd_value=total,
        tokens=list(raw_tokens or []),
    )


def _merge_key(h: NormalizedHolding, by_chain: bool) -> Hashable:
    return (h.chain, h.token_id) if by_chain else h.token_id


def _add_chain(chains: Sequence[str], extra: Iterable[str]) -> tuple:
    out = list(chains)
    for c in extra:
        if c not in out:
            out.append(c)
    return tuple(out)


def _by_value(rows: list) -> list:
    # sorted() keeps ties in encounter order even with reverse=True
    return sorted(rows, key=lambda r: r.value_usd, reverse=True)


def merge_flat(
    holdings: Iterable[NormalizedHolding], by_chain: bool = False
) -> List[NormalizedHolding]:
    """Collapse holdings sharing a token id into one row, richest first.

    The first holding seen for a key provides the descriptive fields; later
    ones only add their ``amount`` and ``value_usd``.
    """

    merged: Dict[Hashable, NormalizedHolding] = {}
    for h in holdings:
        k = _merge_key(h, by_chain)
        cur = merged.get(k)
        if cur is None:
            merged[k] = replace(h, chains=h.chains or (h.chain,))
            continue
        merged[k] = replace(
            cur,
            amount=cur.amount + h.amount,
            value_usd=cur.value_usd + h.value_usd,
            chains=_add_chain(cur.chains, h.chains or (h.chain,)),
        )
    return _by_value(list(merged.values()))


def aggregate_wallet(
    wallet: str,
    chain_summaries: Sequence[ChainSummary],
    holdings: Iterable[NormalizedHolding],
    by_chain: bool = False,
) -> WalletSnapshot:
    """Build the snapshot of ``wallet`` from its chain summaries and holdings."""

    total = 0.0
    for c in chain_summaries:
        total += c.usd_value
    return WalletSnapshot(
        wallet=wallet,
        total_usd_value=total,
        chains=list(chain_summaries),
        tokens_flat=merge_flat(holdings, by_chain=by_chain),
    )


def merge_portfolio(
    snapshots: Iterable[WalletSnapshot], by_chain: bool = False
) -> List[ToplineRow]:
    """Combine every wallet's flat list into one row per token identity."""

    merged: Dict[Hashable, ToplineRow] = {}
    for snap in snapshots:
        for h in snap.tokens_flat:
            k = _merge_key(h, by_chain)
            row = merged.get(k)
            if row is None:
                row = merged[k] = ToplineRow(
                    token_id=h.token_id,
                    symbol=h.symbol,
                    name=h.name,
                    decimals=h.decimals,
                    logo_url=h.logo_url,
                    price_usd=h.price_usd,
                )
            row.amount += h.amount
            row.value_usd += h.value_usd
            row.occurrences += 1
            row.chains = list(_add_chain(row.chains, h.chains or (h.chain,)))
    return _by_value(list(merged.values()))
