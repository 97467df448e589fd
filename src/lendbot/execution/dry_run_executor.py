"""Dry-run executor: logs decisions without touching the exchange."""

from collections.abc import Sequence

from lendbot.execution.executor import Executor
from lendbot.logging import get_logger
from lendbot.models import Action

logger = get_logger(__name__)


class DryRunExecutor(Executor):
    """Logs each action as it would be executed and reports all as done."""

    async def execute(self, actions: Sequence[Action], currency: str) -> list[Action]:
        for action in actions:
            logger.info(
                "dry_run_action",
                action=action.kind.value,
                description=action.describe(currency),
            )
        return list(actions)
