"""Abstract exchange client interface.

Defines the contract for all funding-exchange implementations.
Runner and execution code depend only on this interface, keeping
Bitfinex-specific wire formats isolated in the concrete implementation.

Rates crossing this interface are annualized percentages.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from lendbot.models import ActiveOffer, LendBook, WalletBalance


class ExchangeClient(ABC):
    """Abstract base class for funding-exchange API clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection and load markets."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_lendbook(self, currency: str) -> LendBook:
        """Fetch the funding order book asks, ascending by rate.

        The floating reference rate, when available, is returned on
        LendBook.floating_reference_rate and never as an ask.
        """
        ...

    @abstractmethod
    async def fetch_active_offers(self, currency: str) -> list[ActiveOffer]:
        """Fetch the account's outstanding funding offers for a currency."""
        ...

    @abstractmethod
    async def fetch_wallet_balance(self, currency: str) -> WalletBalance:
        """Fetch the funding (deposit) wallet balance for a currency."""
        ...

    @abstractmethod
    async def fetch_ticker_mid(self, symbol: str) -> Decimal:
        """Fetch the mid price ((bid + ask) / 2) of a trading pair."""
        ...

    @abstractmethod
    async def cancel_offer(self, offer_id: int) -> dict:
        """Cancel a single funding offer."""
        ...

    @abstractmethod
    async def cancel_all_offers(self, currency: str) -> dict:
        """Cancel every funding offer in a currency."""
        ...

    @abstractmethod
    async def submit_offer(
        self,
        currency: str,
        amount: Decimal,
        annual_rate: Decimal,
        period_days: int,
    ) -> dict:
        """Place a new lend offer."""
        ...
