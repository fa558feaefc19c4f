"""
Per-run memo of market quotes, keyed by ordered currency pair.
"""
import logging
from typing import Dict, Optional, Tuple

from .market_client import MarketQuote

logger = logging.getLogger(__name__)


class QuoteCache:
    """
    Memo table of (have, want) -> best affordable offer.
    
    The amount a quote was fetched for is not part of the key: once a pair is
    cached, the same result is returned for any later amount. A pair with no
    affordable offer is cached as None so the market is asked at most once per
    pair during a run. No TTL and no eviction; one cache lives for one search.
    """
    
    def __init__(self):
        # (have_currency, want_currency) -> quote, or None for "no offer"
        self._cache: Dict[Tuple[int, int], Optional[MarketQuote]] = {}
        self.hits = 0
        self.misses = 0
    
    def is_cached(self, have_currency: int, want_currency: int) -> bool:
        """Check whether a result (found or not) is recorded for this pair."""
        return (have_currency, want_currency) in self._cache
    
    def lookup(self, have_currency: int, want_currency: int) -> Tuple[bool, Optional[MarketQuote]]:
        """
        Look up a pair.

        Returns:
            Tuple of (is_cached, quote); quote is None for pairs cached as "no offer"
        """
        key = (have_currency, want_currency)
        if key in self._cache:
            self.hits += 1
            logger.debug(f"Cache hit for have={have_currency}, want={want_currency}")
            return True, self._cache[key]

        self.misses += 1
        return False, None

    def get(self, have_currency: int, want_currency: int) -> Optional[MarketQuote]:
        """
        Return the cached quote for a pair.

        Returns None both for unknown pairs and pairs cached as "no offer";
        use is_cached() or lookup() to tell them apart.
        """
        return self.lookup(have_currency, want_currency)[1]
    
    def put(self, have_currency: int, want_currency: int, quote: Optional[MarketQuote]) -> None:
        """Record the lookup result for a pair."""
        self._cache[(have_currency, want_currency)] = quote
    
    def __len__(self) -> int:
        return len(self._cache)
