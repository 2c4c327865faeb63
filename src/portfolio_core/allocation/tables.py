"""Allocation lookup tables.

Target weights are keyed by (risk profile, market-cap tier). The stable
reserve is not a tier: it gets a fixed share per profile and the crypto
weights are scaled into what remains.
"""

from __future__ import annotations

from enum import Enum

from portfolio_core.models.enums import RiskProfile


class Tier(str, Enum):
    BTC = "btc"
    ETH = "eth"
    TOP_10 = "top10"
    TOP_20 = "top20"
    TOP_50 = "top50"
    TOP_100 = "top100"
    TAIL = "tail"


# (market cap above, estimated rank); first match wins, else 25
MARKET_CAP_RANKS = (
    (100_000_000_000, 1),
    (50_000_000_000, 2),
    (20_000_000_000, 3),
    (10_000_000_000, 4),
    (5_000_000_000, 5),
    (2_000_000_000, 10),
    (1_000_000_000, 15),
    (500_000_000, 20),
)
DEFAULT_RANK = 25

# (rank at most, tier)
RANK_TIERS = (
    (10, Tier.TOP_10),
    (20, Tier.TOP_20),
    (50, Tier.TOP_50),
    (100, Tier.TOP_100),
)

BASE_TARGETS: dict[RiskProfile, dict[Tier, float]] = {
    RiskProfile.CONSERVATIVE: {
        Tier.BTC: 60, Tier.ETH: 30, Tier.TOP_10: 5, Tier.TOP_20: 0,
        Tier.TOP_50: 0, Tier.TOP_100: 0, Tier.TAIL: 0,
    },
    RiskProfile.BALANCED: {
        Tier.BTC: 50, Tier.ETH: 25, Tier.TOP_10: 8, Tier.TOP_20: 5,
        Tier.TOP_50: 2, Tier.TOP_100: 0, Tier.TAIL: 0,
    },
    RiskProfile.AGGRESSIVE: {
        Tier.BTC: 40, Tier.ETH: 20, Tier.TOP_10: 12, Tier.TOP_20: 8,
        Tier.TOP_50: 5, Tier.TOP_100: 3, Tier.TAIL: 2,
    },
    # Degen skips the majors: trending mid-caps and speculative small caps
    RiskProfile.DEGEN: {
        Tier.BTC: 0, Tier.ETH: 0, Tier.TOP_10: 15, Tier.TOP_20: 15,
        Tier.TOP_50: 10, Tier.TOP_100: 8, Tier.TAIL: 5,
    },
}

STABLE_SHARE: dict[RiskProfile, float] = {
    RiskProfile.CONSERVATIVE: 10,
    RiskProfile.BALANCED: 10,
    RiskProfile.AGGRESSIVE: 0,
    RiskProfile.DEGEN: 6,
}


def market_cap_rank(market_cap: float) -> int:
    """Rough rank estimate from market cap alone."""
    for above, rank in MARKET_CAP_RANKS:
        if market_cap > above:
            return rank
    return DEFAULT_RANK


def tier_for(symbol: str, market_cap: float, btc_symbol: str = "BTC", eth_symbol: str = "ETH") -> Tier:
    sym = symbol.upper()
    if sym == btc_symbol.upper():
        return Tier.BTC
    if sym == eth_symbol.upper():
        return Tier.ETH
    rank = market_cap_rank(market_cap)
    for limit, tier in RANK_TIERS:
        if rank <= limit:
            return tier
    return Tier.TAIL


def target_weight(profile: RiskProfile, tier: Tier) -> float:
    return BASE_TARGETS[profile][tier]
