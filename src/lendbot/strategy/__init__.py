"""Lending strategies -- pure offer allocators and input normalization."""

from lendbot.strategy.decay import allocate_decay, decay_daily_rate
from lendbot.strategy.depth_split import allocate_depth_split
from lendbot.strategy.dispatcher import StrategyName, execute_strategy, resolve_strategy
from lendbot.strategy.funds import (
    floating_reference_daily_rate,
    min_loan_size,
    truncate_amount,
)

__all__ = [
    "StrategyName",
    "allocate_decay",
    "allocate_depth_split",
    "decay_daily_rate",
    "execute_strategy",
    "floating_reference_daily_rate",
    "min_loan_size",
    "resolve_strategy",
    "truncate_amount",
]
