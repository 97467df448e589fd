"""Exchange client layer -- Bitfinex funding API integration via ccxt."""

from lendbot.exchange.bitfinex_client import BitfinexClient
from lendbot.exchange.client import ExchangeClient

__all__ = ["BitfinexClient", "ExchangeClient"]
