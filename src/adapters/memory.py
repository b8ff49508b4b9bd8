"""
Memory gateways — in-process реализации коллабораторов

Используются в тестах и симуляциях: балансы, share token, рынки и цены
хранятся в словарях. MemoryLedger.apply() исполняет bank / share token
инструкции из Response так, как это сделал бы host.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional, Tuple

from src.adapters.gateways import (
    BankGateway,
    ExchangeGateway,
    Gateways,
    PriceFeedGateway,
    ShareTokenGateway,
)
from src.core.domain.exchange import DerivativeMarket, PriceState, SpotMarket
from src.core.domain.host import BankSend, Response, WasmExecute
from src.core.errors import InsufficientBalance
from src.core.math.fixed_point import check_uint128, checked_sub

logger = logging.getLogger(__name__)


class MemoryBank(BankGateway):
    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = {}

    def query_balance(self, address: str, denom: str) -> int:
        return self._balances.get((address, denom), 0)

    def set_balance(self, address: str, denom: str, amount: int) -> None:
        self._balances[(address, denom)] = check_uint128(amount)

    def credit(self, address: str, denom: str, amount: int) -> None:
        self.set_balance(address, denom, self.query_balance(address, denom) + amount)

    def debit(self, address: str, denom: str, amount: int) -> None:
        balance = self.query_balance(address, denom)
        if amount > balance:
            raise InsufficientBalance(f"{address} has {balance}{denom}, needs {amount}{denom}")
        self.set_balance(address, denom, balance - amount)


class MemoryShareToken(ShareTokenGateway):
    def __init__(self):
        self._supply: Dict[str, int] = {}
        self._balances: Dict[Tuple[str, str], int] = {}

    def query_supply(self, token: str) -> int:
        return self._supply.get(token, 0)

    def query_balance(self, token: str, address: str) -> int:
        return self._balances.get((token, address), 0)

    def mint(self, token: str, recipient: str, amount: int) -> None:
        self._supply[token] = check_uint128(self.query_supply(token) + amount)
        self._balances[(token, recipient)] = self.query_balance(token, recipient) + amount

    def burn(self, token: str, holder: str, amount: int) -> None:
        self._balances[(token, holder)] = checked_sub(self.query_balance(token, holder), amount)
        self._supply[token] = checked_sub(self.query_supply(token), amount)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        self._balances[(token, sender)] = checked_sub(self.query_balance(token, sender), amount)
        self._balances[(token, recipient)] = self.query_balance(token, recipient) + amount


class MemoryExchange(ExchangeGateway):
    def __init__(self):
        self._spot: Dict[str, SpotMarket] = {}
        self._derivative: Dict[str, DerivativeMarket] = {}

    def add_spot_market(self, market: SpotMarket) -> None:
        self._spot[market.market_id] = market

    def add_derivative_market(self, market: DerivativeMarket) -> None:
        self._derivative[market.market_id] = market

    def query_spot_market(self, market_id: str) -> Optional[SpotMarket]:
        return self._spot.get(market_id)

    def query_derivative_market(self, market_id: str) -> Optional[DerivativeMarket]:
        return self._derivative.get(market_id)


class MemoryPriceFeed(PriceFeedGateway):
    def __init__(self):
        self._prices: Dict[str, PriceState] = {}

    def set_price(self, price_id: str, price: Decimal, timestamp: int) -> None:
        self._prices[price_id] = PriceState(price=price, timestamp=timestamp)

    def query_pyth_price(self, price_id: str) -> Optional[PriceState]:
        return self._prices.get(price_id)


class MemoryLedger:
    """
    Набор memory gateways + исполнение исходящих инструкций.

    apply() обрабатывает BankSend и mint / burn share token; биржевые
    инструкции и instantiate остаются на стороне вызывающего (reply
    доставляется тестом явно).
    """

    def __init__(self):
        self.bank = MemoryBank()
        self.share_token = MemoryShareToken()
        self.exchange = MemoryExchange()
        self.price_feed = MemoryPriceFeed()

    @property
    def gateways(self) -> Gateways:
        return Gateways(
            bank=self.bank,
            share_token=self.share_token,
            exchange=self.exchange,
            price_feed=self.price_feed,
        )

    def apply(self, vault_address: str, response: Response) -> None:
        """
        Исполнение инструкций response от имени vault.

        Burn списывает share с баланса vault: share token переводит
        share на vault до уведомления о withdraw.
        """
        for sub_msg in response.messages:
            msg = sub_msg.msg
            if isinstance(msg, BankSend):
                for coin in msg.amount:
                    self.bank.debit(vault_address, coin.denom, coin.amount)
                    self.bank.credit(msg.to_address, coin.denom, coin.amount)
            elif isinstance(msg, WasmExecute) and "mint" in msg.msg:
                body = msg.msg["mint"]
                self.share_token.mint(msg.contract_addr, body["recipient"], int(body["amount"]))
            elif isinstance(msg, WasmExecute) and "burn" in msg.msg:
                self.share_token.burn(
                    msg.contract_addr, vault_address, int(msg.msg["burn"]["amount"])
                )
            else:
                logger.debug("memory ledger skips %s", type(msg).__name__)
