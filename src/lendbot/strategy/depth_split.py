"""Order-book splitting allocator ("marginbot").

Spreads available funds over several offers whose rates are read from the
lendbook at evenly spaced cumulative depths between gap_bottom and gap_top.
An optional high-hold slice is carved out first and offered at a fixed
premium rate for 30 days.

Rates in the config are daily percentages; every emitted Lend carries an
annualized rate (daily x 365).
"""

from decimal import Decimal

from lendbot.config import DepthSplitSettings
from lendbot.logging import get_logger
from lendbot.models import Action, LendBook, Lend
from lendbot.strategy.funds import daily_to_annual, truncate_amount

logger = get_logger(__name__)

HIGH_HOLD_PERIOD_DAYS = 30
LONG_PERIOD_DAYS = 30
SHORT_PERIOD_DAYS = 2


def allocate_depth_split(
    available_funds: Decimal,
    min_loan_size: Decimal,
    lendbook: LendBook,
    settings: DepthSplitSettings,
) -> list[Action]:
    """Compute the lend offers for one run of the splitting strategy.

    Steps:
    1. Nothing to do when available_funds < min_loan_size.
    2. High-hold: if high_hold_amount > min_loan_size, offer
       min(available_funds, high_hold_amount) at high_hold_daily_rate for
       30 days and remove it from the pool.
    3. Split the remainder into num_splits equal (truncated) parts, reducing
       the split count until each part exceeds min_loan_size.
    4. Walk the lendbook once, advancing a cumulative-depth pointer to
       gap_bottom + k * climb for split k, and take the ask rate there.
    5. Raise rates below min_daily_rate to the minimum; offers at or above
       the thirty-day threshold are made for 30 days, others for 2.

    Args:
        available_funds: Lendable funds in the wallet currency.
        min_loan_size: Exchange minimum offer size in the wallet currency.
        lendbook: Current funding order book.
        settings: Strategy parameters.

    Returns:
        Lend actions, high-hold first, then splits in depth order.
    """
    actions: list[Action] = []

    if available_funds < min_loan_size:
        return actions

    split_funds = available_funds

    # high_hold_amount = 0 disables the high-hold slice
    if settings.high_hold_amount > min_loan_size:
        high_hold = Lend(
            amount=truncate_amount(min(available_funds, settings.high_hold_amount)),
            annual_rate=daily_to_annual(settings.high_hold_daily_rate),
            period_days=HIGH_HOLD_PERIOD_DAYS,
        )
        split_funds -= high_hold.amount
        actions.append(high_hold)

    num_splits = settings.num_splits
    if num_splits <= 0 or split_funds < min_loan_size:
        return actions

    amount_each = truncate_amount(split_funds / num_splits)
    while amount_each <= min_loan_size:
        num_splits -= 1
        if num_splits <= 0:
            logger.debug(
                "no_split_possible",
                split_funds=str(split_funds),
                min_loan=str(min_loan_size),
            )
            return actions
        amount_each = truncate_amount(split_funds / num_splits)

    min_annual_rate = daily_to_annual(settings.min_daily_rate)
    thirty_day_annual_rate = daily_to_annual(settings.thirty_day_threshold_daily)
    climb = (settings.gap_top - settings.gap_bottom) / num_splits

    # A zero-amount FRR level is a quote nobody offers at
    asks = [
        level
        for level in lendbook.asks
        if not (level.is_floating_reference and level.amount <= 0)
    ]
    depth_index = 0
    depth_amount = asks[0].amount if asks else Decimal("0")

    for k in range(num_splits):
        next_lend = settings.gap_bottom + k * climb

        while depth_amount < next_lend and depth_index < len(asks) - 1:
            depth_index += 1
            depth_amount += asks[depth_index].amount

        if depth_amount < next_lend:
            logger.debug(
                "lendbook_depth_exhausted",
                split=k,
                target_depth=str(next_lend),
                book_depth=str(depth_amount),
            )

        rate = min_annual_rate
        if asks and asks[depth_index].rate >= min_annual_rate:
            rate = asks[depth_index].rate

        if settings.thirty_day_threshold_daily > 0 and rate >= thirty_day_annual_rate:
            period = LONG_PERIOD_DAYS
        else:
            period = SHORT_PERIOD_DAYS

        actions.append(Lend(amount=amount_each, annual_rate=rate, period_days=period))

    return actions
