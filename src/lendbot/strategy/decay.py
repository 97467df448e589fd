"""Rate-decay allocator ("cascadebot").

Fresh funds are offered at FRR + start_daily_rate_over_frr. Offers that stay
unfilled for reduction_interval_minutes are cancelled and re-offered one step
cheaper: first a linear step down, then an exponential pull toward the
minimum rate. Only one step is taken per run, so missed runs (e.g. after a
connection outage) never drop an offer straight to the floor.
"""

from collections.abc import Sequence
from decimal import Decimal

from lendbot.config import DecaySettings
from lendbot.logging import get_logger
from lendbot.models import Action, ActiveOffer, Cancel, Lend
from lendbot.strategy.funds import annual_to_daily, daily_to_annual, truncate_amount

logger = get_logger(__name__)


def decay_daily_rate(daily_rate: Decimal, settings: DecaySettings) -> Decimal:
    """Apply one reduction step to a daily rate, never going below the minimum."""
    rate = daily_rate - settings.reduce_daily_rate_step
    rate = (rate - settings.min_daily_rate) * settings.exponential_decay_multiplier
    rate += settings.min_daily_rate
    return max(rate, settings.min_daily_rate)


def offer_age_minutes(offer: ActiveOffer, now: float) -> int:
    """Whole minutes elapsed since the offer was created."""
    return int(now - offer.created_at) // 60


def allocate_decay(
    available_funds: Decimal,
    min_loan_size: Decimal,
    floating_reference_daily_rate: Decimal,
    active_offers: Sequence[ActiveOffer],
    settings: DecaySettings,
    now: float,
) -> list[Action]:
    """Compute cancel and lend actions for one run of the decay strategy.

    Args:
        available_funds: Lendable funds in the wallet currency.
        min_loan_size: Exchange minimum offer size in the wallet currency.
        floating_reference_daily_rate: Current FRR, daily %.
        active_offers: The account's outstanding lend offers.
        settings: Strategy parameters.
        now: Current unix time in seconds.

    Returns:
        Ordered actions: for each stale offer a Cancel, optionally followed
        by its re-offer; then at most one Lend for the spare funds.
    """
    actions: list[Action] = []

    for offer in active_offers:
        age = offer_age_minutes(offer, now)
        if age < int(settings.reduction_interval_minutes):
            continue

        actions.append(Cancel(offer_id=offer.id))

        # Too small to re-lend on its own: the remainder returns to the
        # wallet and goes out at the starting rate
        if offer.remaining_amount < min_loan_size:
            available_funds += offer.remaining_amount
            continue

        new_daily_rate = decay_daily_rate(annual_to_daily(offer.rate), settings)
        logger.debug(
            "offer_rate_decayed",
            offer_id=offer.id,
            age_minutes=age,
            old_daily_rate=str(annual_to_daily(offer.rate)),
            new_daily_rate=str(new_daily_rate),
        )
        actions.append(
            Lend(
                amount=truncate_amount(offer.remaining_amount),
                annual_rate=daily_to_annual(new_daily_rate),
                period_days=offer.period_days,
            )
        )

    if available_funds >= min_loan_size and available_funds > 0:
        start_daily_rate = floating_reference_daily_rate + settings.start_daily_rate_over_frr
        actions.append(
            Lend(
                amount=truncate_amount(available_funds),
                annual_rate=daily_to_annual(start_daily_rate),
                period_days=settings.offer_period_days,
            )
        )

    return actions
