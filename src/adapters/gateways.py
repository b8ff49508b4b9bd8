"""
Gateways — интерфейсы коллабораторов vault

Vault не владеет ни балансами, ни share token, ни книгой ордеров, ни ценами:
он только запрашивает их и формирует исходящие инструкции.

Интерфейсы (ABC):
- BankGateway: балансы нативных монет
- ShareTokenGateway: supply / balance share token, инструкции mint / burn / instantiate
- ExchangeGateway: рынки venue, trading identity, инструкции ордеров / отмен
- PriceFeedGateway: цены oracle feed

Построение исходящих инструкций не зависит от реализации запросов,
поэтому builders реализованы в базовых классах.

Реализации: adapters.memory (in-process), adapters.lcd (HTTP REST, read-only).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from bech32 import bech32_decode, convertbits

from src.core.domain.exchange import (
    BatchUpdateOrders,
    CancelDerivativeOrder,
    CancelSpotOrder,
    CreateDerivativeMarketOrder,
    DerivativeMarket,
    DerivativeOrder,
    OrderInfo,
    OrderType,
    PriceState,
    SpotMarket,
    SpotOrder,
)
from src.core.domain.host import WasmExecute, WasmInstantiate
from src.core.errors import InvalidAddress

# Длина nonce части subaccount id (hex символов)
SUBACCOUNT_NONCE_HEX_LENGTH = 24


# =============================================================================
# BANK
# =============================================================================


class BankGateway(ABC):
    @abstractmethod
    def query_balance(self, address: str, denom: str) -> int:
        """Баланс address в denom (base units)."""


# =============================================================================
# SHARE TOKEN
# =============================================================================


class ShareTokenGateway(ABC):
    """Share token (cw20-совместимый): запросы и инструкции."""

    @abstractmethod
    def query_supply(self, token: str) -> int:
        """Total supply share token (raw 12-decimal units)."""

    @abstractmethod
    def query_balance(self, token: str, address: str) -> int:
        """Баланс share у address."""

    def mint_msg(self, token: str, recipient: str, amount: int) -> WasmExecute:
        return WasmExecute(
            contract_addr=token,
            msg={"mint": {"recipient": recipient, "amount": str(amount)}},
        )

    def burn_msg(self, token: str, amount: int) -> WasmExecute:
        return WasmExecute(contract_addr=token, msg={"burn": {"amount": str(amount)}})

    def instantiate_msg(
        self,
        code_id: int,
        name: str,
        symbol: str,
        decimals: int,
        minter: str,
        label: str,
    ) -> WasmInstantiate:
        """Создание share token: без начальных балансов, minter = vault."""
        return WasmInstantiate(
            code_id=code_id,
            msg={
                "name": name,
                "symbol": symbol,
                "decimals": decimals,
                "initial_balances": [],
                "mint": {"minter": minter, "cap": None},
                "marketing": None,
            },
            label=label,
        )


# =============================================================================
# EXCHANGE VENUE
# =============================================================================


class ExchangeGateway(ABC):
    """Exchange venue: рынки, trading identity, ордера."""

    @abstractmethod
    def query_spot_market(self, market_id: str) -> Optional[SpotMarket]:
        """Спотовый рынок или None если не найден."""

    @abstractmethod
    def query_derivative_market(self, market_id: str) -> Optional[DerivativeMarket]:
        """Деривативный рынок или None если не найден."""

    def default_subaccount_id(self, address: str) -> str:
        """
        Trading identity vault на venue: hex байтов bech32 адреса + нулевой nonce.

        Example:
            inj14hj2tavq8fpesdwxxcu44rty3hh90vhujaxlnz
            → 0xade4a5f5803a439835c636395a8d648dee57b2fc000000000000000000000000

        Raises:
            InvalidAddress: если адрес не является корректным bech32
        """
        hrp, data = bech32_decode(address)
        if hrp is None or data is None:
            raise InvalidAddress(f"Invalid bech32 address: {address}")
        raw = convertbits(data, 5, 8, False)
        if raw is None:
            raise InvalidAddress(f"Invalid bech32 payload: {address}")
        return "0x" + bytes(raw).hex() + "0" * SUBACCOUNT_NONCE_HEX_LENGTH

    def spot_order_msg(
        self,
        sender: str,
        market_id: str,
        subaccount_id: str,
        order_type: OrderType,
        price: Decimal,
        quantity: Decimal,
    ) -> BatchUpdateOrders:
        """Spot ордер создаётся через batch update с единственным ордером."""
        order = SpotOrder(
            market_id=market_id,
            order_info=OrderInfo(
                subaccount_id=subaccount_id,
                fee_recipient=sender,
                price=price,
                quantity=quantity,
            ),
            order_type=order_type,
        )
        return BatchUpdateOrders(sender=sender, spot_orders_to_create=[order])

    def derivative_order_msg(
        self,
        sender: str,
        market_id: str,
        subaccount_id: str,
        order_type: OrderType,
        price: Decimal,
        quantity: Decimal,
        margin: Decimal,
    ) -> CreateDerivativeMarketOrder:
        order = DerivativeOrder(
            market_id=market_id,
            order_info=OrderInfo(
                subaccount_id=subaccount_id,
                fee_recipient=sender,
                price=price,
                quantity=quantity,
            ),
            order_type=order_type,
            margin=margin,
        )
        return CreateDerivativeMarketOrder(sender=sender, order=order)

    def cancel_spot_order_msg(
        self, sender: str, market_id: str, subaccount_id: str, order_hash: str
    ) -> CancelSpotOrder:
        return CancelSpotOrder(
            sender=sender,
            market_id=market_id,
            subaccount_id=subaccount_id,
            order_hash=order_hash,
        )

    def cancel_derivative_order_msg(
        self,
        sender: str,
        market_id: str,
        subaccount_id: str,
        order_hash: str,
        order_mask: int,
    ) -> CancelDerivativeOrder:
        return CancelDerivativeOrder(
            sender=sender,
            market_id=market_id,
            subaccount_id=subaccount_id,
            order_hash=order_hash,
            order_mask=order_mask,
        )


# =============================================================================
# PRICE FEED
# =============================================================================


class PriceFeedGateway(ABC):
    @abstractmethod
    def query_pyth_price(self, price_id: str) -> Optional[PriceState]:
        """Последний семпл feed или None если price state отсутствует."""


# =============================================================================
# BUNDLE
# =============================================================================


@dataclass(frozen=True)
class Gateways:
    """Набор коллабораторов, передаваемый в vault."""

    bank: BankGateway
    share_token: ShareTokenGateway
    exchange: ExchangeGateway
    price_feed: PriceFeedGateway
