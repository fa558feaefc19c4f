"""
Cycle finder.
Bounded depth-first search for trade loops over live market offers.
"""
import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Protocol

from .currencies import currency_name
from .market_client import MarketQuote
from .path_context import InvariantViolation, PathContext, PathHop
from .quote_cache import QuoteCache
from .utils import get_terminal_colors

logger = logging.getLogger(__name__)
colors = get_terminal_colors()


class QuoteProvider(Protocol):
    """Anything that can price a trade, e.g. PoeTradeClient."""

    async def get_quote(
        self,
        have_currency: int,
        want_currency: int,
        have_amount: int
    ) -> Optional[MarketQuote]:
        ...


@dataclass
class Cycle:
    """A trade path that ends in the currency it started with."""
    hops: List[PathHop]

    def __post_init__(self):
        """Validate cycle shape."""
        if len(self.hops) < 2:
            raise ValueError("Cycle must have at least 2 hops")
        if self.hops[0].currency_id != self.hops[-1].currency_id:
            raise ValueError("Cycle must start and end with the same currency")

    @property
    def start_amount(self) -> int:
        return self.hops[0].amount

    @property
    def final_amount(self) -> int:
        return self.hops[-1].amount

    @property
    def profit(self) -> int:
        return self.final_amount - self.start_amount

    @property
    def is_profitable(self) -> bool:
        return self.profit > 0

    @property
    def currency_ids(self) -> List[int]:
        return [hop.currency_id for hop in self.hops]


class CycleSearch:
    """
    One search run: owns the quote cache, the path buffer and the found cycles.

    Build a new instance per run; nothing is shared between instances unless a
    cache is passed in explicitly.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        currencies: Mapping[int, str],
        start_amount: int,
        max_depth: int = 3,
        cache: Optional[QuoteCache] = None
    ):
        """
        Initialize a search run.

        Args:
            provider: Source of market quotes on cache miss
            currencies: Registry of currency id -> name; candidates are taken from it
            start_amount: Amount of the starting currency
            max_depth: Maximum number of hops in a path (keep it > 2 to reach any loop)
            cache: Optional quote cache (a fresh one by default)
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")

        self.provider = provider
        self.currencies = currencies
        self.start_amount = start_amount
        self.max_depth = max_depth
        self.cache = cache if cache is not None else QuoteCache()
        self.context = PathContext()
        self.cycles: List[Cycle] = []
        self.provider_calls = 0

    def _name(self, currency_id: int) -> str:
        return currency_name(currency_id, self.currencies)

    async def get_quote(self, have_currency: int, want_currency: int, have_amount: int) -> Optional[MarketQuote]:
        """
        Quote for a pair, asking the provider only on a cache miss.

        Raises:
            MarketDataError: propagated from the provider
        """
        cached, quote = self.cache.lookup(have_currency, want_currency)
        if cached:
            return quote

        self.provider_calls += 1
        quote = await self.provider.get_quote(have_currency, want_currency, have_amount)
        self.cache.put(have_currency, want_currency, quote)
        return quote

    def _record_cycle(self) -> None:
        cycle = Cycle(hops=self.context.snapshot())
        self.cycles.append(cycle)
        logger.info(
            f"{colors['YELLOW']}Back where we started:{colors['RESET']} "
            f"{' -> '.join(self._name(c) for c in cycle.currency_ids)} "
            f"({cycle.start_amount} -> {cycle.final_amount})"
        )

    async def delve(self, currency_id: int) -> bool:
        """
        Visit currency_id with the current path and explore onward trades.

        Returns:
            True if this visit closed a cycle or finished exploring its candidates,
            False if it was pruned by depth or abandoned for lack of an offer.

        Raises:
            InvariantViolation: if the path grew past max_depth
            MarketDataError: if a market lookup failed
        """
        # Have we come back to where we started?
        if self.context and self.context.start.currency_id == currency_id:
            self._record_cycle()
            return True

        depth = len(self.context)
        if depth > self.max_depth:
            raise InvariantViolation(f"delved too deep: path length {depth} > max depth {self.max_depth}")
        if depth == self.max_depth:
            logger.debug(f"Hit max depth at {self._name(currency_id)}")
            return False

        seeded = False
        try:
            for candidate_id in list(self.currencies):
                if candidate_id == currency_id:
                    continue

                logger.debug(f"Investigating {self._name(currency_id)} -> {self._name(candidate_id)}")

                if not self.context:
                    self.context.init(currency_id, self.start_amount)
                    seeded = True

                quote = await self.get_quote(currency_id, candidate_id, self.context.last.amount)
                if quote is None:
                    # No offer for this edge: give up on every other trade from this node too.
                    logger.debug(
                        f"{colors['DIM']}No offer {self._name(currency_id)} -> {self._name(candidate_id)}, "
                        f"abandoning node{colors['RESET']}"
                    )
                    return False

                self.context.extend(candidate_id, quote)
                try:
                    await self.delve(candidate_id)
                finally:
                    self.context.retract()

            return True
        finally:
            if seeded:
                self.context.retract()

    async def run(self, start_currency_id: int) -> List[Cycle]:
        """
        Search for cycles starting and ending at start_currency_id.

        Returns:
            Cycles found during this run, in discovery order

        Raises:
            InvariantViolation, MarketDataError: fatal errors, no partial results
        """
        logger.info(
            f"Starting with currency={colors['CYAN']}{self._name(start_currency_id)}{colors['RESET']} "
            f"amount={self.start_amount} max_depth={self.max_depth}"
        )

        await self.delve(start_currency_id)

        if self.context:
            raise InvariantViolation(f"trade path not unwound after search: {self.context.hops}")

        logger.info(
            f"Finished! cycles={len(self.cycles)} market_requests={self.provider_calls} "
            f"cache_hits={self.cache.hits} cache_misses={self.cache.misses} cached_pairs={len(self.cache)}"
        )
        return list(self.cycles)
