"""Adapters — реализации коллабораторов vault (bank, share token, venue, price feed)."""

from .gateways import (
    BankGateway,
    ExchangeGateway,
    Gateways,
    PriceFeedGateway,
    ShareTokenGateway,
)
from .memory import (
    MemoryBank,
    MemoryExchange,
    MemoryLedger,
    MemoryPriceFeed,
    MemoryShareToken,
)

__all__ = [
    "BankGateway",
    "ExchangeGateway",
    "Gateways",
    "PriceFeedGateway",
    "ShareTokenGateway",
    "MemoryBank",
    "MemoryExchange",
    "MemoryLedger",
    "MemoryPriceFeed",
    "MemoryShareToken",
]
