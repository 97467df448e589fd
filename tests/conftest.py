"""Shared test fixtures for the lending bot."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from lendbot.config import (
    AccountConfig,
    DecaySettings,
    DepthSplitSettings,
    ExchangeSettings,
    StrategySettings,
)
from lendbot.exchange.client import ExchangeClient
from lendbot.models import LendBook, OrderBookLevel, WalletBalance


@pytest.fixture
def exchange_settings() -> ExchangeSettings:
    """USD wallet, no active-amount limit, 50 USD minimum loan."""
    return ExchangeSettings(
        api_key="test-api-key",  # type: ignore[arg-type]
        api_secret="test-api-secret",  # type: ignore[arg-type]
        active_wallet="usd",
        max_active_amount=Decimal("-1"),
        min_loan_usd=Decimal("50"),
    )


@pytest.fixture
def depth_split_settings() -> DepthSplitSettings:
    return DepthSplitSettings(
        min_daily_rate=Decimal("0.05"),
        num_splits=2,
        gap_bottom=Decimal("0"),
        gap_top=Decimal("1000"),
        thirty_day_threshold_daily=Decimal("0"),
        high_hold_daily_rate=Decimal("0.1"),
        high_hold_amount=Decimal("0"),
    )


@pytest.fixture
def decay_settings() -> DecaySettings:
    return DecaySettings(
        start_daily_rate_over_frr=Decimal("0.01"),
        min_daily_rate=Decimal("0.02"),
        reduction_interval_minutes=Decimal("60"),
        reduce_daily_rate_step=Decimal("0.001"),
        exponential_decay_multiplier=Decimal("0.5"),
        offer_period_days=2,
    )


@pytest.fixture
def account(
    exchange_settings: ExchangeSettings,
    depth_split_settings: DepthSplitSettings,
    decay_settings: DecaySettings,
) -> AccountConfig:
    return AccountConfig(
        exchange=exchange_settings,
        strategy=StrategySettings(
            active="marginbot",
            margin_bot=depth_split_settings,
            cascade_bot=decay_settings,
        ),
    )


@pytest.fixture
def lendbook() -> LendBook:
    """Three asks at 0.04, 0.06 and 0.08 %/day, 500 each, with FRR at 0.05."""
    return LendBook(
        asks=(
            OrderBookLevel(rate=Decimal("0.04") * 365, amount=Decimal("500")),
            OrderBookLevel(rate=Decimal("0.06") * 365, amount=Decimal("500")),
            OrderBookLevel(rate=Decimal("0.08") * 365, amount=Decimal("500")),
        ),
        floating_reference_rate=Decimal("0.05") * 365,
    )


@pytest.fixture
def mock_exchange_client(lendbook: LendBook) -> AsyncMock:
    """ExchangeClient mock with a 1000 USD funding wallet and no offers."""
    client = AsyncMock(spec=ExchangeClient)
    client.fetch_wallet_balance.return_value = WalletBalance(
        currency="usd", amount=Decimal("1000"), available=Decimal("1000")
    )
    client.fetch_lendbook.return_value = lendbook
    client.fetch_active_offers.return_value = []
    client.fetch_ticker_mid.return_value = Decimal("25000")
    client.cancel_offer.return_value = {}
    client.cancel_all_offers.return_value = {}
    client.submit_offer.return_value = {}
    return client
