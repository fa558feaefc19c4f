"""
Pytest configuration and fixtures for currency cycle finder tests.
"""
import pytest
from unittest.mock import AsyncMock

from poe_arbitrage.market_client import MarketQuote


# Small test registry: A and B plus two extra currencies for wider nodes.
CURRENCY_A = 1
CURRENCY_B = 2
CURRENCY_C = 3
CURRENCY_D = 4


@pytest.fixture
def two_currencies():
    """Registry with only A and B."""
    return {CURRENCY_A: "alteration", CURRENCY_B: "fusing"}


@pytest.fixture
def four_currencies():
    """Registry with A, B, C and D."""
    return {
        CURRENCY_A: "alteration",
        CURRENCY_B: "fusing",
        CURRENCY_C: "alchemy",
        CURRENCY_D: "chaos",
    }


@pytest.fixture
def quote_a_to_b():
    """Pay 1 A, receive 2 B."""
    return MarketQuote(username="SellerOfB", pay_amount=1.0, receive_amount=2.0)


@pytest.fixture
def quote_b_to_a():
    """Pay 1 B, receive 0.5 A."""
    return MarketQuote(username="SellerOfA", pay_amount=1.0, receive_amount=0.5)


@pytest.fixture
def make_provider():
    """
    Build a mock quote provider from a {(have, want): quote} table.
    
    Pairs missing from the table have no offer. Affordability is checked
    against the amount passed in, like the real client.
    """
    def _make(quotes):
        async def get_quote(have_currency, want_currency, have_amount):
            quote = quotes.get((have_currency, want_currency))
            if quote is None or quote.pay_amount > have_amount:
                return None
            return quote
        
        provider = AsyncMock()
        provider.get_quote.side_effect = get_quote
        return provider
    
    return _make


@pytest.fixture
def two_currency_provider(make_provider, quote_a_to_b, quote_b_to_a):
    """Provider for the A <-> B market."""
    return make_provider({
        (CURRENCY_A, CURRENCY_B): quote_a_to_b,
        (CURRENCY_B, CURRENCY_A): quote_b_to_a,
    })


def offer_line(username="GOrdonFlicker", sell_currency=1, sell_value="4.0",
               buy_currency=2, buy_value="1.0", ign="Rangeroided", stock="45"):
    """Build one offer row as it appears on the search page."""
    return (
        f'            <div class="displayoffer " data-username="{username}" '
        f'data-sellcurrency="{sell_currency}" data-sellvalue="{sell_value}" '
        f'data-buycurrency="{buy_currency}" data-buyvalue="{buy_value}" '
        f'data-ign="{ign}" data-stock="{stock}">'
    )


@pytest.fixture
def offer_row():
    """Factory for offer rows."""
    return offer_line
