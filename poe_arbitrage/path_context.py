"""
Trade path buffer used by the cycle search.
"""
import copy
import logging
import math
from dataclasses import dataclass
from typing import Iterator, List

from .market_client import MarketQuote

logger = logging.getLogger(__name__)

# Counterparty recorded on the starting hop.
NO_COUNTERPARTY = "N/A"


class InvariantViolation(RuntimeError):
    """The search reached a state that correct code never produces."""


@dataclass
class PathHop:
    """One hop of a trade path."""
    currency_id: int
    amount: int  # quantity of currency_id held after this hop
    counterparty: str = NO_COUNTERPARTY


class PathContext:
    """
    Mutable sequence of hops for the route currently being explored.
    
    hops[0] is the start of the cycle. The search extends the path before
    descending into a currency and retracts it on the way back, so at any
    moment the buffer holds exactly one candidate partial route. Depth limits
    are the search's job, not this class's.
    """
    
    def __init__(self):
        self.hops: List[PathHop] = []
    
    def init(self, currency_id: int, amount: int) -> PathHop:
        """Reset the path to a single starting hop."""
        hop = PathHop(currency_id=currency_id, amount=amount, counterparty=NO_COUNTERPARTY)
        logger.debug(f"Populating starting node: {hop}")
        self.hops = [hop]
        return hop
    
    def extend(self, currency_id: int, quote: MarketQuote) -> PathHop:
        """
        Trade everything held at the last hop into currency_id at the quoted rate.
        
        The new amount is floored to a whole number of currency items.
        
        Raises:
            InvariantViolation: if the path is empty
        """
        if not self.hops:
            raise InvariantViolation("attempting to extend an empty trade path")
        
        last = self.hops[-1]
        hop = PathHop(
            currency_id=currency_id,
            amount=math.floor(last.amount / quote.pay_amount * quote.receive_amount),
            counterparty=quote.username
        )
        logger.debug(f"Appending to trade path with {hop}")
        self.hops.append(hop)
        return hop
    
    def retract(self) -> PathHop:
        """
        Remove and return the last hop.
        
        Raises:
            InvariantViolation: if the path is empty
        """
        if not self.hops:
            raise InvariantViolation("attempting to pop empty trade path")
        
        hop = self.hops.pop()
        logger.debug(f"Popping from trade path: {hop}")
        return hop
    
    def snapshot(self) -> List[PathHop]:
        """Deep copy of the current hops, safe to keep after backtracking."""
        return copy.deepcopy(self.hops)
    
    @property
    def start(self) -> PathHop:
        return self.hops[0]
    
    @property
    def last(self) -> PathHop:
        return self.hops[-1]
    
    def __len__(self) -> int:
        return len(self.hops)
    
    def __getitem__(self, index: int) -> PathHop:
        return self.hops[index]
    
    def __iter__(self) -> Iterator[PathHop]:
        return iter(self.hops)
    
    def __bool__(self) -> bool:
        return bool(self.hops)
