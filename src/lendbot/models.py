"""Shared data models for the lending bot.

All rates and amounts use Decimal. Rates on these models are annualized
percentages (daily % x 365), the unit the exchange quotes and accepts.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

DAYS_PER_YEAR = Decimal("365")


class ActionKind(str, Enum):
    """Action tag."""

    CANCEL = "cancel"
    LEND = "lend"


@dataclass(frozen=True)
class OrderBookLevel:
    """A single ask in the funding order book."""

    rate: Decimal  # annualized %
    amount: Decimal
    is_floating_reference: bool = False


@dataclass(frozen=True)
class LendBook:
    """Snapshot of the funding order book. Asks ascend by rate.

    floating_reference_rate is the exchange FRR (annualized %) when known; it
    is a quote, not an ask, and is never part of the depth.
    """

    asks: tuple[OrderBookLevel, ...] = ()
    floating_reference_rate: Decimal | None = None



@dataclass(frozen=True)
class ActiveOffer:
    """An outstanding funding offer owned by the account."""

    id: int
    currency: str
    amount: Decimal
    remaining_amount: Decimal
    rate: Decimal  # annualized %
    period_days: int
    created_at: float  # unix seconds
    direction: str = "lend"


@dataclass(frozen=True)
class WalletBalance:
    """Funding (deposit) wallet balance for one currency."""

    currency: str
    amount: Decimal
    available: Decimal


@dataclass(frozen=True)
class Cancel:
    """Cancel an active offer."""

    offer_id: int
    kind: ActionKind = field(default=ActionKind.CANCEL, init=False)

    def describe(self, currency: str) -> str:
        return f"Canceling {currency} offer ID: {self.offer_id}"


@dataclass(frozen=True)
class Lend:
    """Place a new lend offer."""

    amount: Decimal
    annual_rate: Decimal
    period_days: int
    kind: ActionKind = field(default=ActionKind.LEND, init=False)

    @property
    def daily_rate(self) -> Decimal:
        return self.annual_rate / DAYS_PER_YEAR

    def describe(self, currency: str) -> str:
        return (
            f"Placing offer: {self.amount} {currency} @ {self.daily_rate} %/day "
            f"for {self.period_days} days"
        )


Action = Cancel | Lend


@dataclass(frozen=True)
class AllocationInputs:
    """Everything an allocator needs for one run, gathered by the runner.

    min_loan_size and available_funds are already in the wallet currency.
    """

    available_funds: Decimal
    min_loan_size: Decimal
    lendbook: LendBook = field(default_factory=LendBook)
    active_offers: tuple[ActiveOffer, ...] = ()
    floating_reference_daily_rate: Decimal = Decimal("1")
    now: float = 0.0
