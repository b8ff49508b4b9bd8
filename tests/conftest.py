"""
Общие fixtures для тестов vault.

VaultHarness собирает Vault поверх memory gateways с тестовыми адресами,
рынками и ценами; fixtures spot / perpetual возвращают vault после
instantiate и привязки share token.
"""

import json
from decimal import Decimal

import pytest

from src.adapters.memory import MemoryLedger
from src.core.domain.asset import Coin
from src.core.domain.exchange import DerivativeMarket, MarketStatus, SpotMarket
from src.core.domain.host import BlockInfo, Env, MessageInfo, Reply, SubMsgResult
from src.core.domain.messages import InstantiateMsg
from src.core.domain.vault_config import VenueKind
from src.vault.contract import Vault


class VaultHarness:
    CONTRACT = "inj14hj2tavq8fpesdwxxcu44rty3hh90vhujaxlnz"
    SUBACCOUNT = "0xade4a5f5803a439835c636395a8d648dee57b2fc000000000000000000000000"
    MARKET_ID = "0x78c2d3af98c517b164070a739681d4bd4d293101e7ffc3a30968945329b47ec6"
    OWNER = "addr0000"
    USER = "addr0001"
    SHARE_TOKEN = "liquidity0000"
    HARDCAP = 5000_000000000000
    NOW = 1_700_000_000

    BASE = "INJ"
    QUOTE = "USDT"
    BASE_PRICE_ID = "0xinjpriceid"
    QUOTE_PRICE_ID = "0xusdtpriceid"

    def __init__(self, kind: VenueKind, market_status: MarketStatus = MarketStatus.ACTIVE):
        self.kind = kind
        self.ledger = MemoryLedger()
        self.vault = Vault(self.ledger.gateways)
        self.env = Env(block=BlockInfo(height=12345, time=self.NOW), contract_address=self.CONTRACT)

        if kind == VenueKind.SPOT:
            self.ledger.exchange.add_spot_market(
                SpotMarket(
                    market_id=self.MARKET_ID,
                    ticker="INJ/USDT",
                    base_denom=self.BASE,
                    quote_denom=self.QUOTE,
                    status=market_status,
                )
            )
        else:
            self.ledger.exchange.add_derivative_market(
                DerivativeMarket(
                    market_id=self.MARKET_ID,
                    ticker="INJ/USDT PERP",
                    quote_denom=self.QUOTE,
                    status=market_status,
                )
            )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def instantiate_msg(self, **overrides) -> InstantiateMsg:
        fields = dict(
            kind=self.kind,
            owner=self.OWNER,
            market_id=self.MARKET_ID,
            quote_decimal=6,
            hardcap=self.HARDCAP,
            token_code_id=1,
        )
        if self.kind == VenueKind.SPOT:
            fields.update(
                base_decimal=18,
                base_price_id=self.BASE_PRICE_ID,
                quote_price_id=self.QUOTE_PRICE_ID,
            )
        fields.update(overrides)
        return InstantiateMsg(**fields)

    def instantiate(self, **overrides):
        return self.vault.instantiate(
            self.env, MessageInfo(sender=self.OWNER), self.instantiate_msg(**overrides)
        )

    def token_reply(self, address: str = SHARE_TOKEN) -> Reply:
        payload = json.dumps({"contract_address": address}).encode()
        return Reply(id=1, result=SubMsgResult.ok(payload))

    def bind_share_token(self, address: str = SHARE_TOKEN):
        return self.vault.reply(self.env, self.token_reply(address))

    # -------------------------------------------------------------------------
    # World state
    # -------------------------------------------------------------------------

    def info(self, sender: str, *coins: Coin) -> MessageInfo:
        return MessageInfo(sender=sender, funds=tuple(coins))

    def set_balance(self, denom: str, amount: int) -> None:
        self.ledger.bank.set_balance(self.CONTRACT, denom, amount)

    def set_fee(self, denom: str, amount: int) -> None:
        self.vault.state.save_fee(denom, amount)

    def mint_shares(self, holder: str, amount: int) -> None:
        self.ledger.share_token.mint(self.SHARE_TOKEN, holder, amount)

    def set_prices(self, base: str, quote: str, timestamp: int = NOW) -> None:
        self.ledger.price_feed.set_price(self.BASE_PRICE_ID, Decimal(base), timestamp)
        self.ledger.price_feed.set_price(self.QUOTE_PRICE_ID, Decimal(quote), timestamp)

    def execute(self, sender: str, msg, *coins: Coin):
        return self.vault.execute(self.env, self.info(sender, *coins), msg)

    def query(self, msg):
        return self.vault.query(self.env, msg)

    @property
    def supply(self) -> int:
        return self.ledger.share_token.query_supply(self.SHARE_TOKEN)


@pytest.fixture
def perpetual() -> VaultHarness:
    """PERPETUAL vault (USDT, 6 decimals) с привязанным share token."""
    harness = VaultHarness(VenueKind.PERPETUAL)
    harness.instantiate()
    harness.bind_share_token()
    return harness


@pytest.fixture
def spot() -> VaultHarness:
    """SPOT vault (INJ 18 decimals / USDT 6 decimals) с привязанным share token."""
    harness = VaultHarness(VenueKind.SPOT)
    harness.instantiate()
    harness.bind_share_token()
    return harness
