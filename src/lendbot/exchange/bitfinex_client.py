"""Bitfinex funding client implementation via ccxt async.

Wraps ccxt.async_support.bitfinex and its implicit v2 REST methods for the
funding (margin lending) market. Bitfinex quotes funding rates as daily
fractions (0.0002 == 0.02 %/day); they are converted to annualized percent
on the way in and back on the way out.

All numeric values are converted through Decimal(str(value)).
"""

from decimal import Decimal

import ccxt.async_support as ccxt_async
from ccxt.base.errors import BadResponse

from lendbot.config import ExchangeSettings
from lendbot.exchange.client import ExchangeClient
from lendbot.logging import get_logger
from lendbot.models import DAYS_PER_YEAR, ActiveOffer, LendBook, OrderBookLevel, WalletBalance

logger = get_logger(__name__)

_PERCENT = Decimal("100")

# Number of price levels requested from the funding book
_BOOK_LENGTH = 100

# Field positions in Bitfinex v2 array responses
_BOOK_RATE, _BOOK_AMOUNT = 0, 3
_OFFER_ID, _OFFER_SYMBOL, _OFFER_CREATED = 0, 1, 2
_OFFER_AMOUNT, _OFFER_AMOUNT_ORIG = 4, 5
_OFFER_RATE, _OFFER_PERIOD = 14, 15
_WALLET_TYPE, _WALLET_CURRENCY, _WALLET_BALANCE, _WALLET_AVAILABLE = 0, 1, 2, 4
_TICKER_FRR = 0


def funding_symbol(currency: str) -> str:
    """Bitfinex funding symbol for a currency, e.g. usd -> fUSD."""
    return f"f{currency.upper()}"


def to_annual_percent(daily_fraction: float | str) -> Decimal:
    return Decimal(str(daily_fraction)) * _PERCENT * DAYS_PER_YEAR


def to_daily_fraction(annual_percent: Decimal) -> Decimal:
    return annual_percent / DAYS_PER_YEAR / _PERCENT


def parse_offer(raw: list) -> ActiveOffer:
    """Build an ActiveOffer from a v2 funding offer array."""
    remaining = Decimal(str(raw[_OFFER_AMOUNT]))
    symbol = str(raw[_OFFER_SYMBOL])
    return ActiveOffer(
        id=int(raw[_OFFER_ID]),
        currency=symbol[1:].lower() if symbol.startswith("f") else symbol.lower(),
        amount=abs(Decimal(str(raw[_OFFER_AMOUNT_ORIG]))),
        remaining_amount=abs(remaining),
        rate=to_annual_percent(raw[_OFFER_RATE]),
        period_days=int(raw[_OFFER_PERIOD]),
        created_at=float(raw[_OFFER_CREATED]) / 1000.0,
        direction="lend" if remaining >= 0 else "loan",
    )


class BitfinexClient(ExchangeClient):
    """Concrete Bitfinex funding client using ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings
        self._exchange = ccxt_async.bitfinex(
            {
                "apiKey": settings.api_key.get_secret_value(),
                "secret": settings.api_secret.get_secret_value(),
                "enableRateLimit": True,
            }
        )

    @property
    def exchange(self) -> ccxt_async.bitfinex:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info("connecting_to_bitfinex")
        markets = await self._exchange.load_markets()
        logger.info("bitfinex_connected", market_count=len(markets))

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        await self._exchange.close()
        logger.info("bitfinex_connection_closed")

    async def fetch_lendbook(self, currency: str) -> LendBook:
        """Fetch funding asks plus the FRR from the funding ticker.

        Funding book entries are [RATE, PERIOD, COUNT, AMOUNT]; AMOUNT > 0
        is an ask (lender offer).
        """
        symbol = funding_symbol(currency)
        book = await self._exchange.public_get_book_symbol_precision(
            {"symbol": symbol, "precision": "P0", "len": _BOOK_LENGTH}
        )
        asks = [
            OrderBookLevel(
                rate=to_annual_percent(entry[_BOOK_RATE]),
                amount=Decimal(str(entry[_BOOK_AMOUNT])),
            )
            for entry in book
            if Decimal(str(entry[_BOOK_AMOUNT])) > 0
        ]

        asks.sort(key=lambda level: level.rate)

        frr = None
        ticker = await self._exchange.public_get_ticker_symbol({"symbol": symbol})
        if ticker and ticker[_TICKER_FRR] is not None:
            frr = to_annual_percent(ticker[_TICKER_FRR])

        logger.debug("fetched_lendbook", currency=currency, asks=len(asks), frr=str(frr))
        return LendBook(asks=tuple(asks), floating_reference_rate=frr)

    async def fetch_active_offers(self, currency: str) -> list[ActiveOffer]:
        raw = await self._exchange.private_post_auth_r_funding_offers_symbol(
            {"symbol": funding_symbol(currency)}
        )
        offers = [parse_offer(entry) for entry in raw]
        logger.debug("fetched_active_offers", currency=currency, count=len(offers))
        return offers

    async def fetch_wallet_balance(self, currency: str) -> WalletBalance:
        """Return the funding wallet balance, zero when the wallet does not exist.

        Wallet entries are [TYPE, CURRENCY, BALANCE, UNSETTLED_INTEREST,
        AVAILABLE_BALANCE, ...].
        """
        wallets = await self._exchange.private_post_auth_r_wallets()
        for wallet in wallets:
            if wallet[_WALLET_TYPE] == "funding" and str(wallet[_WALLET_CURRENCY]).lower() == currency.lower():
                available = wallet[_WALLET_AVAILABLE]
                return WalletBalance(
                    currency=currency.lower(),
                    amount=Decimal(str(wallet[_WALLET_BALANCE] or 0)),
                    available=Decimal(str(available or 0)),
                )
        return WalletBalance(currency=currency.lower(), amount=Decimal("0"), available=Decimal("0"))

    async def fetch_ticker_mid(self, symbol: str) -> Decimal:
        ticker = await self._exchange.fetch_ticker(symbol)
        if ticker.get("bid") is None or ticker.get("ask") is None:
            raise BadResponse(f"{symbol} ticker has no bid/ask")
        mid = (Decimal(str(ticker["bid"])) + Decimal(str(ticker["ask"]))) / 2
        if mid <= 0:
            raise BadResponse(f"{symbol} ticker mid is not positive: {mid}")
        return mid

    async def cancel_offer(self, offer_id: int) -> dict:
        logger.info("cancelling_offer", offer_id=offer_id)
        return await self._exchange.private_post_auth_w_funding_offer_cancel({"id": offer_id})

    async def cancel_all_offers(self, currency: str) -> dict:
        logger.info("cancelling_all_offers", currency=currency)
        return await self._exchange.private_post_auth_w_funding_offer_cancel_all(
            {"currency": currency.upper()}
        )

    async def submit_offer(
        self,
        currency: str,
        amount: Decimal,
        annual_rate: Decimal,
        period_days: int,
    ) -> dict:
        """Place a LIMIT funding offer. Amount and rate are sent as strings."""
        daily_fraction = to_daily_fraction(annual_rate)
        logger.info(
            "submitting_offer",
            currency=currency,
            amount=str(amount),
            daily_rate=str(daily_fraction * _PERCENT),
            period_days=period_days,
        )
        return await self._exchange.private_post_auth_w_funding_offer_submit(
            {
                "type": "LIMIT",
                "symbol": funding_symbol(currency),
                "amount": str(amount),
                "rate": str(daily_fraction),
                "period": period_days,
                "flags": 0,
            }
        )
