"""Strategy selection by configured name."""

from collections.abc import Callable
from enum import Enum

from lendbot.config import StrategySettings
from lendbot.exceptions import UnknownStrategyError
from lendbot.models import Action, AllocationInputs
from lendbot.strategy.decay import allocate_decay
from lendbot.strategy.depth_split import allocate_depth_split


class StrategyName(str, Enum):
    """Registered allocators."""

    MARGINBOT = "marginbot"
    CASCADEBOT = "cascadebot"


def _run_depth_split(inputs: AllocationInputs, settings: StrategySettings) -> list[Action]:
    return allocate_depth_split(
        inputs.available_funds,
        inputs.min_loan_size,
        inputs.lendbook,
        settings.margin_bot,
    )


def _run_decay(inputs: AllocationInputs, settings: StrategySettings) -> list[Action]:
    return allocate_decay(
        inputs.available_funds,
        inputs.min_loan_size,
        inputs.floating_reference_daily_rate,
        inputs.active_offers,
        settings.cascade_bot,
        inputs.now,
    )


_ALLOCATORS: dict[StrategyName, Callable[[AllocationInputs, StrategySettings], list[Action]]] = {
    StrategyName.MARGINBOT: _run_depth_split,
    StrategyName.CASCADEBOT: _run_decay,
}


def resolve_strategy(name: str | StrategyName) -> StrategyName:
    """Map a configured strategy name (case-insensitive) to a StrategyName.

    Raises:
        UnknownStrategyError: If the name matches no registered allocator.
    """
    if isinstance(name, StrategyName):
        return name
    try:
        return StrategyName(name.strip().lower())
    except ValueError:
        raise UnknownStrategyError(name) from None


def execute_strategy(
    strategy_name: str | StrategyName, inputs: AllocationInputs, settings: StrategySettings
) -> list[Action]:
    """Run the allocator registered under strategy_name on a snapshot.

    Raises:
        UnknownStrategyError: If strategy_name matches no registered allocator.
    """
    return _ALLOCATORS[resolve_strategy(strategy_name)](inputs, settings)
