"""Per-account run: gather a snapshot, allocate, execute.

Each account is processed from its own freshly fetched snapshot:
  1. BALANCE: log the funding wallet state
  2. SNAPSHOT: active offers, lendbook, balance and ticker as the strategy needs
  3. ALLOCATE: dispatch to the configured allocator (pure, synchronous)
  4. EXECUTE: hand the ordered actions to the executor

Any exchange failure is raised as TransportError and ends the run; offers
already cancelled or placed stay as they are.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Sequence
from decimal import Decimal
from typing import TypeVar

from ccxt.base.errors import BaseError as CcxtError

from lendbot.config import AccountConfig, ExchangeSettings
from lendbot.exceptions import ErrorKind, TransportError
from lendbot.exchange.client import ExchangeClient
from lendbot.execution.dry_run_executor import DryRunExecutor
from lendbot.execution.executor import Executor
from lendbot.execution.live_executor import LiveExecutor
from lendbot.logging import get_logger
from lendbot.models import Action, AllocationInputs, WalletBalance
from lendbot.strategy.dispatcher import StrategyName, execute_strategy, resolve_strategy
from lendbot.strategy.funds import (
    check_decay_settings,
    check_depth_split_settings,
    check_wallet_amount,
    floating_reference_daily_rate,
    lend_offers_for,
    limit_decay_available,
    limit_depth_split_available,
    min_loan_size,
)

logger = get_logger(__name__)

T = TypeVar("T")


async def _fetch(kind: ErrorKind, call: Awaitable[T], **context: object) -> T:
    """Await an exchange call, converting ccxt errors into TransportError."""
    try:
        return await call
    except CcxtError as e:
        logger.error("exchange_call_failed", kind=kind.value, error=str(e), **context)
        raise TransportError(kind, e, **context) from e


class AccountRunner:
    """Runs the configured lending strategy for a single account.

    Args:
        account: Exchange and strategy configuration for the account.
        exchange_client: Connected exchange client for this account.
        executor: Executes the allocator's actions (live or dry-run).
        update_lends: When False only the wallet balance is reported.
        dry_run: When True no offers are cancelled up front.
        clock: Returns current unix time in seconds.
    """

    def __init__(
        self,
        account: AccountConfig,
        exchange_client: ExchangeClient,
        executor: Executor,
        update_lends: bool = False,
        dry_run: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._account = account
        self._exchange_client = exchange_client
        self._executor = executor
        self._update_lends = update_lends
        self._dry_run = dry_run
        self._clock = clock
        self._currency = account.exchange.active_wallet.lower()

    async def run(self) -> list[Action]:
        """Report the wallet and, if enabled, run the active strategy.

        Returns:
            The executed actions (empty when lending updates are disabled).

        Raises:
            UnknownStrategyError: If the configured strategy is not registered.
            TransportError: On the first failing exchange call.
        """
        balance = await self._fetch_balance()
        logger.info(
            "deposit_wallet",
            currency=self._currency,
            amount=str(balance.amount),
            available=str(balance.available),
        )

        if not self._update_lends:
            return []

        strategy = resolve_strategy(self._account.strategy.active)
        logger.info("running_strategy", strategy=strategy.value, dry_run=self._dry_run)

        if strategy is StrategyName.MARGINBOT:
            actions = await self._run_depth_split(strategy)
        else:
            actions = await self._run_decay(strategy)

        logger.info("run_done", currency=self._currency, actions=len(actions))
        return actions

    async def _run_depth_split(self, strategy: StrategyName) -> list[Action]:
        settings = self._account.strategy.margin_bot
        check_depth_split_settings(settings)

        # Every run starts from a clean slate: all offers are re-placed
        logger.info("cancelling_active_offers", currency=self._currency)
        if not self._dry_run:
            await _fetch(
                ErrorKind.CANCEL_ALL_OFFERS,
                self._exchange_client.cancel_all_offers(self._currency),
                currency=self._currency,
            )

        lendbook = await _fetch(
            ErrorKind.FETCH_LENDBOOK, self._exchange_client.fetch_lendbook(self._currency)
        )
        balance = await self._fetch_balance()
        minimum = await self._min_loan_size()
        check_wallet_amount(balance.amount, minimum, self._currency)

        available = limit_depth_split_available(
            balance.available, balance.amount, self._account.exchange.max_active_amount
        )
        inputs = AllocationInputs(
            available_funds=available,
            min_loan_size=minimum,
            lendbook=lendbook,
        )
        return await self._allocate_and_execute(strategy, inputs)

    async def _run_decay(self, strategy: StrategyName) -> list[Action]:
        settings = self._account.strategy.cascade_bot

        offers = await _fetch(
            ErrorKind.FETCH_OFFERS, self._exchange_client.fetch_active_offers(self._currency)
        )
        offers = lend_offers_for(offers, self._currency)

        lendbook = await _fetch(
            ErrorKind.FETCH_LENDBOOK, self._exchange_client.fetch_lendbook(self._currency)
        )
        frr = floating_reference_daily_rate(lendbook)
        check_decay_settings(settings, frr)

        balance = await self._fetch_balance()
        minimum = await self._min_loan_size()
        check_wallet_amount(balance.amount, minimum, self._currency)

        inputs = AllocationInputs(
            available_funds=limit_decay_available(
                balance.available, self._account.exchange.max_active_amount
            ),
            min_loan_size=minimum,
            lendbook=lendbook,
            active_offers=tuple(offers),
            floating_reference_daily_rate=frr,
            now=self._clock(),
        )
        return await self._allocate_and_execute(strategy, inputs)

    async def _allocate_and_execute(
        self, strategy: StrategyName, inputs: AllocationInputs
    ) -> list[Action]:
        actions = execute_strategy(strategy, inputs, self._account.strategy)
        logger.info(
            "allocation_computed",
            available=str(inputs.available_funds),
            min_loan=str(inputs.min_loan_size),
            actions=len(actions),
        )
        return await self._executor.execute(actions, self._currency)

    async def _fetch_balance(self) -> WalletBalance:
        return await _fetch(
            ErrorKind.FETCH_BALANCE,
            self._exchange_client.fetch_wallet_balance(self._currency),
        )

    async def _min_loan_size(self) -> Decimal:
        min_loan_usd = self._account.exchange.min_loan_usd
        if self._currency == "usd":
            return min_loan_usd

        symbol = f"{self._currency.upper()}/USD"
        mid = await _fetch(
            ErrorKind.FETCH_TICKER,
            self._exchange_client.fetch_ticker_mid(symbol),
            symbol=symbol,
        )
        try:
            return min_loan_size(min_loan_usd, self._currency, mid)
        except ValueError as e:
            logger.error("invalid_ticker_mid", symbol=symbol, mid=str(mid))
            raise TransportError(ErrorKind.FETCH_TICKER, e, symbol=symbol, mid=mid) from e


async def run_accounts(
    accounts: Sequence[AccountConfig],
    update_lends: bool = False,
    dry_run: bool = False,
    client_factory: Callable[[ExchangeSettings], ExchangeClient] | None = None,
) -> dict[int, list[Action]]:
    """Run every configured account in turn, stopping at the first failure.

    Args:
        accounts: Accounts to process, in order.
        update_lends: Whether to run strategies or only report balances.
        dry_run: Log decisions instead of executing them.
        client_factory: Builds the exchange client for an account.
            Defaults to BitfinexClient.

    Returns:
        Executed actions keyed by account index.
    """
    if client_factory is None:
        from lendbot.exchange.bitfinex_client import BitfinexClient

        client_factory = BitfinexClient

    results: dict[int, list[Action]] = {}
    for index, account in enumerate(accounts):
        api_key = account.exchange.api_key.get_secret_value()
        logger.info("using_api_key", account=index, api_key=f"{api_key[:6]}...")

        client = client_factory(account.exchange)
        executor: Executor = DryRunExecutor() if dry_run else LiveExecutor(client)
        try:
            await _fetch(ErrorKind.CONNECT, client.connect())
            runner = AccountRunner(
                account,
                client,
                executor,
                update_lends=update_lends,
                dry_run=dry_run,
            )
            results[index] = await runner.run()
        finally:
            await client.close()
    return results
