"""
currency.poe.trade client for live exchange offers.
"""
import asyncio
import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import httpx

logger = logging.getLogger(__name__)


# Every offer row on the search page starts with this fragment.
OFFER_MARKER = '<div class="displayoffer " data-username='

# Attributes an offer row must carry to be usable.
REQUIRED_FRAGMENTS = (
    'data-sellcurrency',
    'data-sellvalue',
    'data-buycurrency',
    'data-buyvalue',
    'data-ign',
)

_ATTRIBUTE_RE = re.compile(r'data-([a-z]+)="([^"]*)"')


class MarketDataError(Exception):
    """Market page could not be fetched or understood. Fatal for a search run."""


class RateLimiter:
    """
    Minimum spacing between market requests.

    The search issues requests one at a time; this only keeps them from
    hammering the site. A rate of 0 disables spacing.
    """

    def __init__(self, requests_per_second: float = 0.0):
        self.requests_per_second = requests_per_second
        self.min_interval = 1.0 / requests_per_second if requests_per_second > 0 else 0.0
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self):
        """Wait until the next request is allowed."""
        async with self._lock:
            if self.min_interval <= 0:
                return

            time_since_last = time.monotonic() - self._last_request_time
            if time_since_last < self.min_interval:
                await asyncio.sleep(self.min_interval - time_since_last)

            self._last_request_time = time.monotonic()


@dataclass(frozen=True)
class MarketQuote:
    """A single offer from the market: pay `pay_amount` of have, get `receive_amount` of want."""
    username: str
    pay_amount: float  # data-buyvalue
    receive_amount: float  # data-sellvalue
    ign: Optional[str] = None
    stock: Optional[int] = None


def is_offer_line(line: str) -> bool:
    """Check whether a page line is a complete offer row."""
    return OFFER_MARKER in line and all(fragment in line for fragment in REQUIRED_FRAGMENTS)


def _parse_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def parse_offer_line(line: str) -> MarketQuote:
    """
    Parse one offer row into a MarketQuote.

    Row format:
        <div class="displayoffer " data-username="GOrdonFlicker" data-sellcurrency="1"
         data-sellvalue="4.0" data-buycurrency="2" data-buyvalue="1.0" data-ign="Rangeroided"
         data-stock="45">

    The seller sells `sellvalue` of their currency for `buyvalue` of ours, so
    sellvalue is what we receive and buyvalue is what we pay.

    Raises:
        MarketDataError: if required attributes are missing or not numeric
    """
    attributes: Dict[str, str] = dict(_ATTRIBUTE_RE.findall(line))

    try:
        username = attributes['username']
        receive_amount = float(attributes['sellvalue'])
        pay_amount = float(attributes['buyvalue'])
    except KeyError as e:
        raise MarketDataError(f"Offer row is missing attribute {e}: {line.strip()[:120]}")
    except ValueError as e:
        raise MarketDataError(f"Offer row has a malformed amount ({e}): {line.strip()[:120]}")

    if pay_amount <= 0:
        raise MarketDataError(f"Offer row has non-positive buy value {pay_amount}: {line.strip()[:120]}")
    if receive_amount <= 0:
        raise MarketDataError(f"Offer row has non-positive sell value {receive_amount}: {line.strip()[:120]}")

    return MarketQuote(
        username=username,
        pay_amount=pay_amount,
        receive_amount=receive_amount,
        ign=attributes.get('ign') or None,
        stock=_parse_optional_int(attributes.get('stock')),
    )


def iter_offers(body: str) -> Iterator[MarketQuote]:
    """Yield offers of a search page in page order, parsing rows lazily."""
    for line in body.splitlines():
        if is_offer_line(line):
            yield parse_offer_line(line)


class PoeTradeClient:
    """Client for the currency.poe.trade search page."""

    DEFAULT_HOST = "currency.poe.trade"

    def __init__(
        self,
        league: str = "Synthesis",
        host: Optional[str] = None,
        timeout: float = 10.0,
        requests_per_second: float = 0.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize market client.

        Args:
            league: League whose market is searched
            host: Market host (default: currency.poe.trade)
            timeout: Request timeout in seconds
            requests_per_second: Request spacing (0 = no spacing)
            client: Optional preconfigured httpx.AsyncClient
        """
        self.league = league
        self.host = (host or self.DEFAULT_HOST).rstrip('/')
        self.timeout = timeout
        self.rate_limiter = RateLimiter(requests_per_second=requests_per_second)
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def search_url(self) -> str:
        if self.host.startswith(('http://', 'https://')):
            return f"{self.host}/search"
        return f"http://{self.host}/search"

    async def fetch_page(self, have_currency: int, want_currency: int) -> str:
        """
        GET the raw search page for a currency pair.

        Raises:
            MarketDataError: on transport errors or any status other than 200
        """
        params = {
            "league": self.league,
            "online": "x",
            "stock": "",
            "want": want_currency,
            "have": have_currency,
        }

        await self.rate_limiter.acquire()
        logger.debug(f"GET {self.search_url} want={want_currency} have={have_currency}")

        try:
            response = await self.client.get(self.search_url, params=params)
        except httpx.HTTPError as e:
            raise MarketDataError(f"Request to {self.search_url} failed: {e}") from e

        if response.status_code != 200:
            raise MarketDataError(
                f"Bad response from {self.search_url} (have={have_currency}, want={want_currency}): "
                f"{response.status_code}"
            )

        return response.text

    async def get_quote(
        self,
        have_currency: int,
        want_currency: int,
        have_amount: int
    ) -> Optional[MarketQuote]:
        """
        Get the first listed offer we can afford.

        Args:
            have_currency: Currency id we pay with
            want_currency: Currency id we want
            have_amount: How much of have_currency we hold

        Returns:
            First offer with pay_amount <= have_amount, or None if there is none

        Raises:
            MarketDataError: if the page cannot be fetched or parsed
        """
        body = await self.fetch_page(have_currency, want_currency)

        for quote in iter_offers(body):
            if quote.pay_amount <= have_amount:
                logger.debug(
                    f"Offer {have_currency} -> {want_currency}: pay {quote.pay_amount} "
                    f"get {quote.receive_amount} from {quote.username} (ign={quote.ign}, stock={quote.stock})"
                )
                return quote

        logger.debug(f"No affordable offer for {have_currency} -> {want_currency} with {have_amount}")
        return None

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
