"""
Exchange — модели биржевой площадки (venue) и oracle

Immutable Pydantic модели, которые vault получает от коллабораторов
(рынки, цены) и отправляет им (ордера, отмены).

Vault не хранит открытые ордера: venue — источник истины,
ордер адресуется только по order hash при отмене.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class MarketStatus(str, Enum):
    """Статус рынка на venue"""

    UNSPECIFIED = "Unspecified"
    ACTIVE = "Active"
    PAUSED = "Paused"
    DEMOLISHED = "Demolished"
    EXPIRED = "Expired"


class OrderType(str, Enum):
    """Тип ордера"""

    BUY = "Buy"
    SELL = "Sell"


# =============================================================================
# MARKETS
# =============================================================================


class SpotMarket(BaseModel):
    """Спотовый рынок (dual-asset venue)."""

    market_id: str = Field(..., min_length=1)
    ticker: str = ""
    base_denom: str = Field(..., min_length=1)
    quote_denom: str = Field(..., min_length=1)
    status: MarketStatus = MarketStatus.ACTIVE

    model_config = {"frozen": True}


class DerivativeMarket(BaseModel):
    """Деривативный (perpetual) рынок (single-asset venue)."""

    market_id: str = Field(..., min_length=1)
    ticker: str = ""
    quote_denom: str = Field(..., min_length=1)
    is_perpetual: bool = True
    status: MarketStatus = MarketStatus.ACTIVE

    model_config = {"frozen": True}


class PriceState(BaseModel):
    """Снимок цены oracle feed."""

    price: Decimal = Field(..., ge=0, description="Цена в fixed point")
    timestamp: int = Field(..., description="Время семпла (Unix, секунды)")

    model_config = {"frozen": True}


# =============================================================================
# ORDERS
# =============================================================================


class OrderInfo(BaseModel):
    """Общая часть ордера: от чьего имени, цена, количество."""

    subaccount_id: str = Field(..., min_length=1)
    fee_recipient: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    quantity: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}


class SpotOrder(BaseModel):
    market_id: str
    order_info: OrderInfo
    order_type: OrderType
    trigger_price: Optional[Decimal] = None

    model_config = {"frozen": True}


class DerivativeOrder(BaseModel):
    market_id: str
    order_info: OrderInfo
    order_type: OrderType
    margin: Decimal = Field(..., ge=0)
    trigger_price: Optional[Decimal] = None

    model_config = {"frozen": True}


# =============================================================================
# VENUE INSTRUCTIONS
# =============================================================================


class BatchUpdateOrders(BaseModel):
    """Пакетное обновление ордеров (spot venue создаёт ордер через batch)."""

    sender: str
    subaccount_id: Optional[str] = None
    spot_market_ids_to_cancel_all: list[str] = Field(default_factory=list)
    derivative_market_ids_to_cancel_all: list[str] = Field(default_factory=list)
    spot_orders_to_cancel: list[str] = Field(default_factory=list)
    derivative_orders_to_cancel: list[str] = Field(default_factory=list)
    spot_orders_to_create: list[SpotOrder] = Field(default_factory=list)
    derivative_orders_to_create: list[DerivativeOrder] = Field(default_factory=list)

    model_config = {"frozen": True}


class CreateDerivativeMarketOrder(BaseModel):
    sender: str
    order: DerivativeOrder

    model_config = {"frozen": True}


class CancelSpotOrder(BaseModel):
    sender: str
    market_id: str
    subaccount_id: str
    order_hash: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class CancelDerivativeOrder(BaseModel):
    sender: str
    market_id: str
    subaccount_id: str
    order_hash: str = Field(..., min_length=1)
    order_mask: int = 1

    model_config = {"frozen": True}
