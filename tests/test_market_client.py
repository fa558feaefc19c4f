"""
Tests for market_client.py
"""
import logging

import pytest
from unittest.mock import MagicMock, patch
import httpx

from poe_arbitrage.market_client import (
    MarketDataError,
    MarketQuote,
    PoeTradeClient,
    RateLimiter,
    is_offer_line,
    iter_offers,
    parse_offer_line
)


def make_response(text="", status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


class TestParseOfferLine:
    """Tests for offer row parsing."""
    
    def test_parse_offer_line(self, offer_row):
        """Test sellvalue is received and buyvalue is paid."""
        quote = parse_offer_line(offer_row())
        
        assert quote == MarketQuote(
            username="GOrdonFlicker",
            pay_amount=1.0,
            receive_amount=4.0,
            ign="Rangeroided",
            stock=45
        )
    
    def test_parse_offer_line_without_stock(self, offer_row):
        """Test an empty stock attribute parses as None."""
        quote = parse_offer_line(offer_row(stock=""))
        assert quote.stock is None
    
    def test_parse_offer_line_malformed_value(self, offer_row):
        """Test a non-numeric amount is fatal."""
        with pytest.raises(MarketDataError, match="malformed"):
            parse_offer_line(offer_row(sell_value="lots"))
    
    def test_parse_offer_line_zero_price(self, offer_row):
        """Test a zero buy value is rejected."""
        with pytest.raises(MarketDataError, match="non-positive"):
            parse_offer_line(offer_row(buy_value="0"))
    
    def test_parse_offer_line_non_positive_sell_value(self, offer_row):
        """Test an offer paying out nothing or a negative amount is rejected."""
        with pytest.raises(MarketDataError, match="non-positive sell value"):
            parse_offer_line(offer_row(sell_value="0"))
        with pytest.raises(MarketDataError, match="non-positive sell value"):
            parse_offer_line(offer_row(sell_value="-1.0"))
    
    def test_is_offer_line(self, offer_row):
        """Test only complete offer rows are recognised."""
        assert is_offer_line(offer_row()) is True
        assert is_offer_line('<div class="displayoffer-bottom">') is False
        assert is_offer_line(offer_row().replace('data-ign', 'data-foo')) is False
    
    def test_iter_offers_keeps_page_order(self, offer_row):
        """Test offers are yielded in page order and other lines are skipped."""
        body = "\n".join([
            "<html>",
            offer_row(username="First"),
            "<p>noise</p>",
            offer_row(username="Second"),
            "</html>",
        ])
        
        assert [quote.username for quote in iter_offers(body)] == ["First", "Second"]


class TestPoeTradeClient:
    """Tests for PoeTradeClient class."""
    
    @pytest.fixture
    def client(self):
        """Create a PoeTradeClient instance for testing."""
        return PoeTradeClient(league="Synthesis", timeout=10.0)
    
    def test_client_initialization(self, client):
        """Test PoeTradeClient defaults."""
        assert client.league == "Synthesis"
        assert client.host == "currency.poe.trade"
        assert client.search_url == "http://currency.poe.trade/search"
        assert client.rate_limiter.min_interval == 0.0
    
    def test_client_explicit_scheme(self):
        """Test a host with scheme is used as-is."""
        client = PoeTradeClient(host="https://mirror.example/")
        assert client.search_url == "https://mirror.example/search"
    
    @pytest.mark.asyncio
    async def test_get_quote_first_affordable(self, client, offer_row):
        """Test the first offer we can pay for is returned."""
        body = "\n".join([
            offer_row(username="TooExpensive", buy_value="50.0"),
            offer_row(username="Affordable", buy_value="5.0", sell_value="7.0"),
            offer_row(username="AlsoAffordable", buy_value="1.0"),
        ])
        
        with patch.object(client.client, 'get', return_value=make_response(body)) as mock_get:
            quote = await client.get_quote(4, 6, 10)
        
        assert quote.username == "Affordable"
        assert quote.pay_amount == 5.0
        assert quote.receive_amount == 7.0
        
        params = mock_get.call_args.kwargs['params']
        assert params['have'] == 4
        assert params['want'] == 6
        assert params['league'] == "Synthesis"
        assert params['online'] == "x"
    
    @pytest.mark.asyncio
    async def test_get_quote_logs_offer_details(self, client, offer_row, caplog):
        """Test the chosen offer is logged with seller name and stock."""
        body = offer_row(username="Seller", ign="SellerChar", stock="12")
        
        with patch.object(client.client, 'get', return_value=make_response(body)):
            with caplog.at_level(logging.DEBUG, logger='poe_arbitrage.market_client'):
                await client.get_quote(4, 6, 10)
        
        assert any("ign=SellerChar, stock=12" in r.getMessage() for r in caplog.records)
    
    @pytest.mark.asyncio
    async def test_get_quote_exact_amount_is_affordable(self, client, offer_row):
        """Test an offer costing exactly what we hold is accepted."""
        body = offer_row(buy_value="10.0")
        
        with patch.object(client.client, 'get', return_value=make_response(body)):
            quote = await client.get_quote(4, 6, 10)
        
        assert quote is not None
    
    @pytest.mark.asyncio
    async def test_get_quote_none_affordable(self, client, offer_row):
        """Test None is returned when every offer is too expensive."""
        body = offer_row(buy_value="50.0")
        
        with patch.object(client.client, 'get', return_value=make_response(body)):
            quote = await client.get_quote(4, 6, 10)
        
        assert quote is None
    
    @pytest.mark.asyncio
    async def test_get_quote_empty_page(self, client):
        """Test a page without offers means no quote."""
        with patch.object(client.client, 'get', return_value=make_response("<html></html>")):
            assert await client.get_quote(4, 6, 10) is None
    
    @pytest.mark.asyncio
    async def test_get_quote_stops_at_first_affordable(self, client, offer_row):
        """Test rows after the chosen offer are not parsed."""
        body = "\n".join([
            offer_row(username="Good", buy_value="1.0"),
            offer_row(username="Broken", sell_value="???"),
        ])
        
        with patch.object(client.client, 'get', return_value=make_response(body)):
            quote = await client.get_quote(4, 6, 10)
        
        assert quote.username == "Good"
    
    @pytest.mark.asyncio
    async def test_get_quote_bad_status(self, client):
        """Test a non-200 response is fatal."""
        with patch.object(client.client, 'get', return_value=make_response("oops", status_code=503)):
            with pytest.raises(MarketDataError, match="503"):
                await client.get_quote(4, 6, 10)
    
    @pytest.mark.asyncio
    async def test_get_quote_connection_error(self, client):
        """Test transport errors are fatal and not retried."""
        connection_error = httpx.ConnectError("Connection failed")
        
        with patch.object(client.client, 'get', side_effect=connection_error) as mock_get:
            with pytest.raises(MarketDataError, match="Connection failed"):
                await client.get_quote(4, 6, 10)
        
        assert mock_get.call_count == 1
    
    @pytest.mark.asyncio
    async def test_get_quote_malformed_row(self, client, offer_row):
        """Test a malformed offer row is fatal."""
        body = offer_row(buy_value="abc")
        
        with patch.object(client.client, 'get', return_value=make_response(body)):
            with pytest.raises(MarketDataError):
                await client.get_quote(4, 6, 10)
    
    @pytest.mark.asyncio
    async def test_close(self, client):
        """Test close releases the HTTP client."""
        await client.close()
        assert client.client.is_closed


class TestRateLimiter:
    """Tests for RateLimiter class."""
    
    def test_disabled_by_default(self):
        assert RateLimiter().min_interval == 0.0
    
    def test_interval_from_rate(self):
        assert RateLimiter(requests_per_second=2.0).min_interval == 0.5
    
    @pytest.mark.asyncio
    async def test_acquire_waits_between_requests(self):
        """Test a second request waits for the remaining interval."""
        limiter = RateLimiter(requests_per_second=1.0)
        
        with patch('poe_arbitrage.market_client.asyncio.sleep') as mock_sleep:
            await limiter.acquire()
            await limiter.acquire()
        
        assert mock_sleep.await_count == 1
        assert 0 < mock_sleep.await_args.args[0] <= 1.0
