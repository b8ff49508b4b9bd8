"""
Domain models and value objects.

Contains fundamental vault entities: Asset, VaultConfig, Ownership,
inbound messages, host call context and outbound venue instructions.
"""

from src.core.domain.asset import (
    Asset,
    AssetInfo,
    Coin,
    addr_opt_validate,
    assert_coins_properly_sent,
    format_assets,
    format_lp_token_name,
    validate_address,
)
from src.core.domain.exchange import (
    BatchUpdateOrders,
    CancelDerivativeOrder,
    CancelSpotOrder,
    CreateDerivativeMarketOrder,
    DerivativeMarket,
    DerivativeOrder,
    MarketStatus,
    OrderInfo,
    OrderType,
    PriceState,
    SpotMarket,
    SpotOrder,
)
from src.core.domain.host import (
    BankSend,
    BlockInfo,
    Env,
    MessageInfo,
    Reply,
    ReplyOn,
    Response,
    SubMsg,
    SubMsgResult,
    WasmExecute,
    WasmInstantiate,
)
from src.core.domain.ownership import Expiration, Ownership
from src.core.domain.vault_config import PoolAsset, VaultConfig, VenueKind

__all__ = [
    # Assets
    "Asset",
    "AssetInfo",
    "Coin",
    "addr_opt_validate",
    "assert_coins_properly_sent",
    "format_assets",
    "format_lp_token_name",
    "validate_address",
    # Venue
    "BatchUpdateOrders",
    "CancelDerivativeOrder",
    "CancelSpotOrder",
    "CreateDerivativeMarketOrder",
    "DerivativeMarket",
    "DerivativeOrder",
    "MarketStatus",
    "OrderInfo",
    "OrderType",
    "PriceState",
    "SpotMarket",
    "SpotOrder",
    # Host
    "BankSend",
    "BlockInfo",
    "Env",
    "MessageInfo",
    "Reply",
    "ReplyOn",
    "Response",
    "SubMsg",
    "SubMsgResult",
    "WasmExecute",
    "WasmInstantiate",
    # Ownership / config
    "Expiration",
    "Ownership",
    "PoolAsset",
    "VaultConfig",
    "VenueKind",
]
