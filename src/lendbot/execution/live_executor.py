"""Live executor via exchange client.

Delegates every action to the ExchangeClient (ccxt wrapper) in the order
the allocator emitted them. The first failing call aborts the run.
"""

from collections.abc import Sequence

from ccxt.base.errors import BaseError as CcxtError

from lendbot.exceptions import ErrorKind, TransportError
from lendbot.exchange.client import ExchangeClient
from lendbot.execution.executor import Executor
from lendbot.logging import get_logger
from lendbot.models import Action, Cancel, Lend

logger = get_logger(__name__)


class LiveExecutor(Executor):
    """Real executor that cancels and places offers on the exchange.

    Args:
        exchange_client: The exchange client to send requests through.
    """

    def __init__(self, exchange_client: ExchangeClient) -> None:
        self._exchange_client = exchange_client

    async def execute(self, actions: Sequence[Action], currency: str) -> list[Action]:
        executed: list[Action] = []
        for action in actions:
            logger.info(
                "executing_action",
                action=action.kind.value,
                description=action.describe(currency),
            )
            await self._execute_one(action, currency)
            executed.append(action)
        return executed

    async def _execute_one(self, action: Action, currency: str) -> None:
        if isinstance(action, Cancel):
            try:
                await self._exchange_client.cancel_offer(action.offer_id)
            except CcxtError as e:
                logger.error("cancel_offer_failed", offer_id=action.offer_id, error=str(e))
                raise TransportError(
                    ErrorKind.CANCEL_OFFER, e, offer_id=action.offer_id
                ) from e
        elif isinstance(action, Lend):
            try:
                await self._exchange_client.submit_offer(
                    currency, action.amount, action.annual_rate, action.period_days
                )
            except CcxtError as e:
                logger.error(
                    "place_offer_failed",
                    amount=str(action.amount),
                    annual_rate=str(action.annual_rate),
                    period_days=action.period_days,
                    error=str(e),
                )
                raise TransportError(
                    ErrorKind.PLACE_OFFER,
                    e,
                    amount=action.amount,
                    annual_rate=action.annual_rate,
                    period_days=action.period_days,
                ) from e
