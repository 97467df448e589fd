"""Configuration system using pydantic-settings with environment variable loading.

A single account is described by AppSettings (environment / .env). Several
accounts can be listed in a JSON file and loaded with load_accounts().
"""

import json
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lendbot.exceptions import ConfigError


class ExchangeSettings(BaseSettings):
    """Bitfinex account connection and wallet settings."""

    model_config = SettingsConfigDict(env_prefix="BITFINEX_")

    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    active_wallet: str = "usd"
    max_active_amount: Decimal = Decimal("-1")  # negative = no limit
    min_loan_usd: Decimal = Decimal("50")


class DepthSplitSettings(BaseSettings):
    """Order-book splitting strategy ("marginbot").

    All rates are daily percentages.
    """

    model_config = SettingsConfigDict(env_prefix="MARGINBOT_")

    min_daily_rate: Decimal = Decimal("0.01")
    num_splits: int = 3
    gap_bottom: Decimal = Decimal("0")  # cumulative book depth of the first split
    gap_top: Decimal = Decimal("0")  # cumulative book depth of the last split
    thirty_day_threshold_daily: Decimal = Decimal("0")  # 0 disables 30-day offers
    high_hold_daily_rate: Decimal = Decimal("0")
    high_hold_amount: Decimal = Decimal("0")  # 0 disables high-hold


class DecaySettings(BaseSettings):
    """Rate-decay strategy ("cascadebot").

    All rates are daily percentages.
    """

    model_config = SettingsConfigDict(env_prefix="CASCADEBOT_")

    start_daily_rate_over_frr: Decimal = Decimal("0.02")
    min_daily_rate: Decimal = Decimal("0.01")
    reduction_interval_minutes: Decimal = Decimal("60")
    reduce_daily_rate_step: Decimal = Decimal("0.001")
    exponential_decay_multiplier: Decimal = Decimal("0.9")
    offer_period_days: int = 2


class StrategySettings(BaseSettings):
    """Which strategy runs and its per-strategy parameters."""

    model_config = SettingsConfigDict(env_prefix="STRATEGY_")

    active: str = "marginbot"
    margin_bot: DepthSplitSettings = DepthSplitSettings()
    cascade_bot: DecaySettings = DecaySettings()


class AccountConfig(BaseModel):
    """One lending account: exchange credentials plus its strategy."""

    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    strategy: StrategySettings = Field(default_factory=StrategySettings)


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchange: ExchangeSettings = ExchangeSettings()
    strategy: StrategySettings = StrategySettings()

    def as_account(self) -> AccountConfig:
        """Return the single account described by these settings."""
        return AccountConfig(exchange=self.exchange, strategy=self.strategy)


def load_accounts(path: str | Path) -> list[AccountConfig]:
    """Load a JSON list of account configurations.

    Each entry has the shape of AccountConfig, e.g.::

        [{"exchange": {"api_key": "...", "active_wallet": "btc"},
          "strategy": {"active": "cascadebot", "cascade_bot": {...}}}]

    Raises:
        ConfigError: If the file cannot be read or does not validate.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if not isinstance(raw, list):
        raise ConfigError(f"Config file {path} must contain a list of accounts")

    try:
        return [AccountConfig.model_validate(entry) for entry in raw]
    except ValidationError as e:
        raise ConfigError(f"Invalid account config in {path}: {e}") from e
