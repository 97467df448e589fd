"""Abstract executor interface.

Defines the contract for running allocator actions. LiveExecutor and
DryRunExecutor both implement this ABC, so the runner is identical
regardless of whether decisions are actually placed on the exchange.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from lendbot.models import Action


class Executor(ABC):
    """Abstract base class for action executors."""

    @abstractmethod
    async def execute(self, actions: Sequence[Action], currency: str) -> list[Action]:
        """Run actions in the given order.

        Args:
            actions: Cancel/Lend actions produced by an allocator.
            currency: Wallet currency the actions apply to.

        Returns:
            The actions that were executed, in order.

        Raises:
            TransportError: On the first failing exchange call. Remaining
                actions are not attempted and executed ones are not undone.
        """
        ...
