"""Input normalization shared by the allocators.

Converts raw account state (wallet balance, ticker, active offers, config)
into the numbers the allocators consume, and logs configuration warnings.
"""

from collections.abc import Iterable
from decimal import ROUND_DOWN, Decimal

from lendbot.config import DecaySettings, DepthSplitSettings
from lendbot.logging import get_logger
from lendbot.models import DAYS_PER_YEAR, ActiveOffer, LendBook

logger = get_logger(__name__)

# Exchange minimum-unit granularity for offer amounts
AMOUNT_PLACES = 8

# Used when the lendbook carries no floating reference quote
DEFAULT_FRR_DAILY = Decimal("1")

# 0.003 %/day == 1.095 %/year
_LOW_MIN_DAILY_RATE = Decimal("0.003")
_HIGH_START_DAILY_RATE = Decimal("0.5")


def truncate_amount(value: Decimal, places: int = AMOUNT_PLACES) -> Decimal:
    """Truncate (never round) an amount to the given number of decimal places."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)


def daily_to_annual(daily_rate: Decimal) -> Decimal:
    return daily_rate * DAYS_PER_YEAR


def annual_to_daily(annual_rate: Decimal) -> Decimal:
    return annual_rate / DAYS_PER_YEAR


def floating_reference_daily_rate(lendbook: LendBook) -> Decimal:
    """Return the daily FRR of the lendbook, or DEFAULT_FRR_DAILY.

    The ticker quote on the book wins; otherwise the first ask flagged as an
    FRR offer is used.
    """
    if lendbook.floating_reference_rate is not None:
        return annual_to_daily(lendbook.floating_reference_rate)
    for level in lendbook.asks:
        if level.is_floating_reference:
            return annual_to_daily(level.rate)
    logger.warning("frr_not_in_lendbook", fallback_daily_rate=str(DEFAULT_FRR_DAILY))
    return DEFAULT_FRR_DAILY


def min_loan_size(
    min_loan_usd: Decimal, currency: str, ticker_mid: Decimal | None = None
) -> Decimal:
    """Express the exchange minimum loan (quoted in USD) in the wallet currency.

    Args:
        min_loan_usd: Minimum loan size in USD.
        currency: Wallet currency code.
        ticker_mid: Mid price of <currency>/USD, required unless currency is usd.
    """
    if currency.lower() == "usd":
        return min_loan_usd
    if ticker_mid is None or ticker_mid <= 0:
        raise ValueError(f"Ticker mid price required to convert min loan to {currency}")
    return min_loan_usd / ticker_mid


def limit_depth_split_available(
    available: Decimal, wallet_amount: Decimal, max_active_amount: Decimal
) -> Decimal:
    """Cap lendable funds so total lent never exceeds max_active_amount.

    Funds already lent out (wallet_amount - available) count against the cap.
    A negative max_active_amount disables the limit.
    """
    if max_active_amount < 0:
        return available
    return min(
        available,
        available + max_active_amount - wallet_amount,
        max_active_amount,
    )


def limit_decay_available(available: Decimal, max_active_amount: Decimal) -> Decimal:
    """Cap lendable funds for the decay strategy. Negative means no limit."""
    if max_active_amount < 0:
        return available
    return min(available, max_active_amount)


def lend_offers_for(offers: Iterable[ActiveOffer], currency: str) -> list[ActiveOffer]:
    """Keep only lend offers in the given wallet currency."""
    currency = currency.lower()
    return [
        o
        for o in offers
        if o.currency.lower() == currency and o.direction.lower() == "lend"
    ]


def check_wallet_amount(wallet_amount: Decimal, minimum: Decimal, currency: str) -> None:
    if wallet_amount < minimum:
        logger.warning(
            "wallet_below_min_loan",
            wallet_amount=str(wallet_amount),
            min_loan=str(minimum),
            currency=currency,
        )


def check_depth_split_settings(settings: DepthSplitSettings) -> None:
    """Log non-fatal warnings about suspicious order-book splitting settings."""
    if settings.min_daily_rate <= _LOW_MIN_DAILY_RATE:
        logger.warning("min_daily_rate_low", min_daily_rate=str(settings.min_daily_rate))

    if settings.high_hold_daily_rate < settings.min_daily_rate:
        logger.warning(
            "high_hold_rate_below_min",
            high_hold_daily_rate=str(settings.high_hold_daily_rate),
            min_daily_rate=str(settings.min_daily_rate),
        )


def check_decay_settings(settings: DecaySettings, frr_daily: Decimal) -> None:
    """Log non-fatal warnings about suspicious rate-decay settings."""
    if settings.min_daily_rate <= _LOW_MIN_DAILY_RATE:
        logger.warning("min_daily_rate_low", min_daily_rate=str(settings.min_daily_rate))

    start_rate = frr_daily + settings.start_daily_rate_over_frr
    if start_rate >= _HIGH_START_DAILY_RATE:
        logger.warning("start_daily_rate_high", start_daily_rate=str(start_rate))
