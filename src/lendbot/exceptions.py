"""Custom exceptions for the lending bot.

Configuration warnings are logged, never raised. Insufficient funds is not
an error either: allocators simply return fewer actions.
"""

from enum import Enum
from typing import Any


class LendBotError(Exception):
    """Base exception for all lending bot errors."""


class ConfigError(LendBotError):
    """Raised when the account configuration file is unreadable or invalid."""


class UnknownStrategyError(LendBotError):
    """Raised when the configured strategy name matches no allocator."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Undefined strategy: {name!r}")
        self.name = name


class ErrorKind(str, Enum):
    """Exchange operation that failed."""

    CONNECT = "connect"
    FETCH_OFFERS = "fetch_offers"
    FETCH_LENDBOOK = "fetch_lendbook"
    FETCH_BALANCE = "fetch_balance"
    FETCH_TICKER = "fetch_ticker"
    CANCEL_OFFER = "cancel_offer"
    CANCEL_ALL_OFFERS = "cancel_all_offers"
    PLACE_OFFER = "place_offer"


class TransportError(LendBotError):
    """Raised when an exchange call fails. Fatal for the current account run.

    Args:
        kind: Which exchange operation failed.
        cause: The underlying exception (usually a ccxt error).
        **context: Extra fields describing the failed call (offer id, amount...).
    """

    def __init__(
        self, kind: ErrorKind, cause: BaseException, **context: Any
    ) -> None:
        super().__init__(f"Failed to {kind.value.replace('_', ' ')}: {cause}")
        self.kind = kind
        self.cause = cause
        self.context = context
