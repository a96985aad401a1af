"""Record types shared by the holdings pipeline.

Raw provider payloads stay plain dictionaries; everything produced from them
is one of the dataclasses below.  ``NormalizedHolding`` is frozen so merges
always build new records instead of mutating the inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_CHAINS = ("eth", "bsc", "matic", "arb", "op", "avax", "ftm")


@dataclass(frozen=True)
class NormalizedHolding:
    wallet: str
    chain: str
    token_id: str
    symbol: str = ""
    name: str = ""
    decimals: Optional[int] = None
    price_usd: float = 0.0
    amount: float = 0.0
    value_usd: float = 0.0
    is_core: bool = False
    is_verified: bool = False
    logo_url: Optional[str] = None
    # chains that contributed to a merged row; a fresh holding lists its own
    chains: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallet": self.wallet,
            "chain": self.chain,
            "token_id": self.token_id,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "price_usd": self.price_usd,
            "amount": self.amount,
            "value_usd": self.value_usd,
            "is_core": self.is_core,
            "is_verified": self.is_verified,
            "logo_url": self.logo_url,
            "chains": list(self.chains or (self.chain,)),
        }


@dataclass
class ChainSummary:
    chain: str
    token_count: int = 0
    usd_value: float = 0.0
    tokens: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self, include_raw: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "chain": self.chain,
            "token_count": self.token_count,
            "usd_value": self.usd_value,
        }
        if include_raw:
            out["tokens"] = list(self.tokens)
        return out


@dataclass
class WalletSnapshot:
    wallet: str
    total_usd_value: float
    chains: List[ChainSummary]
    tokens_flat: List[NormalizedHolding]

    def to_dict(self, include_raw: bool = True) -> Dict[str, Any]:
        return {
            "wallet": self.wallet,
            "total_usd_value": self.total_usd_value,
            "chains": [c.to_dict(include_raw) for c in self.chains],
            "tokens_flat": [h.to_dict() for h in self.tokens_flat],
        }


@dataclass
class ToplineRow:
    """One token identity summed over every tracked wallet."""

    token_id: str
    symbol: str = ""
    name: str = ""
    decimals: Optional[int] = None
    logo_url: Optional[str] = None
    price_usd: float = 0.0
    amount: float = 0.0
    value_usd: float = 0.0
    occurrences: int = 0
    chains: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_id": self.token_id,
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "logo_url": self.logo_url,
            "price_usd": self.price_usd,
            "amount": self.amount,
            "value_usd": self.value_usd,
            "occurrences": self.occurrences,
            "chains": list(self.chains),
        }


@dataclass
class FetchResult:
    """Outcome of one adapter call for a (wallet, chain) pair.

    ``error`` holds the failure reason; the token list is then empty.
    """

    wallet: str
    chain: str
    tokens: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class HoldingsConfig:
    wallets: Tuple[str, ...]
    chains: Tuple[str, ...] = DEFAULT_CHAINS
    provider: str = "debank"
    provider_options: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    cache_ttl_sec: float = 60.0
    merge_by_chain: bool = False

    def cache_key(self) -> Tuple[Any, ...]:
        opts = tuple(sorted((str(k), repr(v)) for k, v in self.provider_options.items()))
        return (self.wallets, self.chains, self.provider, opts, self.merge_by_chain)


@dataclass
class HoldingsReport:
    updated_at: str
    wallets: List[WalletSnapshot]
    portfolio_topline: List[ToplineRow]

    def to_dict(self, include_raw: bool = True) -> Dict[str, Any]:
        return {
            "updated_at": self.updated_at,
            "wallets": [w.to_dict(include_raw) for w in self.wallets],
            "portfolio_topline": [r.to_dict() for r in self.portfolio_topline],
        }
