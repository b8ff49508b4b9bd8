"""
Тесты gateways: builders инструкций, trading identity, memory ledger, LCD.

LCD gateways проверяются на MagicMock сессии requests (без сети).
"""

import base64
import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from src.adapters.gateways import Gateways
from src.adapters.lcd import (
    LcdBank,
    LcdClient,
    LcdExchange,
    LcdPriceFeed,
    LcdShareToken,
    lcd_gateways,
)
from src.adapters.memory import MemoryBank, MemoryExchange, MemoryLedger
from src.core.domain.asset import Coin
from src.core.domain.exchange import MarketStatus, PriceState
from src.core.domain.host import BankSend, Response, WasmExecute
from src.core.errors import ExternalQueryError, InsufficientBalance, InvalidAddress, MathError

BASE_URL = "http://lcd.local:1317"
CONTRACT = "inj14hj2tavq8fpesdwxxcu44rty3hh90vhujaxlnz"


def lcd_session(payload=None, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(str(status_code))
    session = MagicMock()
    session.get.return_value = response
    return session


# =============================================================================
# BUILDERS
# =============================================================================


class TestSubaccount:
    def test_default_subaccount_id(self):
        assert MemoryExchange().default_subaccount_id(CONTRACT) == (
            "0xade4a5f5803a439835c636395a8d648dee57b2fc000000000000000000000000"
        )

    @pytest.mark.parametrize("address", ["addr0000", CONTRACT[:-1] + "q", ""])
    def test_invalid_bech32(self, address):
        with pytest.raises(InvalidAddress):
            MemoryExchange().default_subaccount_id(address)


class TestShareTokenMessages:
    def test_mint_and_burn(self):
        token = MemoryLedger().share_token
        assert token.mint_msg("liquidity0000", "addr0001", 5) == WasmExecute(
            contract_addr="liquidity0000", msg={"mint": {"recipient": "addr0001", "amount": "5"}}
        )
        assert token.burn_msg("liquidity0000", 5).msg == {"burn": {"amount": "5"}}


# =============================================================================
# MEMORY
# =============================================================================


class TestMemoryLedger:
    def test_bank_debit(self):
        bank = MemoryBank()
        bank.credit("addr0000", "USDT", 10)
        bank.debit("addr0000", "USDT", 4)
        assert bank.query_balance("addr0000", "USDT") == 6
        with pytest.raises(InsufficientBalance):
            bank.debit("addr0000", "USDT", 7)

    def test_burn_more_than_balance(self):
        ledger = MemoryLedger()
        ledger.share_token.mint("liquidity0000", "addr0001", 5)
        with pytest.raises(MathError):
            ledger.share_token.burn("liquidity0000", "addr0001", 6)

    def test_apply(self):
        ledger = MemoryLedger()
        ledger.bank.set_balance(CONTRACT, "USDT", 100)
        ledger.share_token.mint("liquidity0000", CONTRACT, 7)
        token = ledger.share_token
        response = (
            Response()
            .add_message(token.mint_msg("liquidity0000", "addr0001", 3))
            .add_message(token.burn_msg("liquidity0000", 7))
            .add_message(BankSend(to_address="addr0001", amount=[Coin(denom="USDT", amount=40)]))
        )

        ledger.apply(CONTRACT, response)

        assert token.query_supply("liquidity0000") == 3
        assert token.query_balance("liquidity0000", "addr0001") == 3
        assert ledger.bank.query_balance(CONTRACT, "USDT") == 60
        assert ledger.bank.query_balance("addr0001", "USDT") == 40

    def test_gateways_bundle(self):
        ledger = MemoryLedger()
        gateways = ledger.gateways
        assert isinstance(gateways, Gateways)
        assert gateways.bank is ledger.bank


# =============================================================================
# LCD
# =============================================================================


class TestLcdClient:
    def test_strips_trailing_slash(self):
        session = lcd_session({"ok": True})
        client = LcdClient(BASE_URL + "/", session=session, timeout=3)
        assert client.get("/x", params={"a": 1}) == {"ok": True}
        session.get.assert_called_once_with(BASE_URL + "/x", params={"a": 1}, timeout=3)

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ExternalQueryError, match="LCD request failed"):
            LcdClient(BASE_URL, session=session).get("/x")

    def test_http_error(self):
        with pytest.raises(ExternalQueryError, match="LCD error 500"):
            LcdClient(BASE_URL, session=lcd_session(status_code=500)).get("/x")

    def test_not_found_allowed(self):
        client = LcdClient(BASE_URL, session=lcd_session(status_code=404))
        assert client.get("/x", allow_not_found=True) is None

    def test_non_json(self):
        session = lcd_session()
        session.get.return_value.json.side_effect = ValueError("no json")
        with pytest.raises(ExternalQueryError, match="non-JSON"):
            LcdClient(BASE_URL, session=session).get("/x")


class TestLcdGateways:
    def test_bank_balance(self):
        session = lcd_session({"balance": {"denom": "USDT", "amount": "123"}})
        bank = LcdBank(LcdClient(BASE_URL, session=session))
        assert bank.query_balance(CONTRACT, "USDT") == 123
        session.get.assert_called_once_with(
            f"{BASE_URL}/cosmos/bank/v1beta1/balances/{CONTRACT}/by_denom",
            params={"denom": "USDT"},
            timeout=10.0,
        )

    def test_bank_missing_field(self):
        bank = LcdBank(LcdClient(BASE_URL, session=lcd_session({"balance": {}})))
        with pytest.raises(ExternalQueryError, match="missing balance.amount"):
            bank.query_balance(CONTRACT, "USDT")

    def test_share_token_supply(self):
        session = lcd_session({"data": {"total_supply": "180000000000000"}})
        token = LcdShareToken(LcdClient(BASE_URL, session=session))
        assert token.query_supply("liquidity0000") == 180_000000000000

        url = session.get.call_args.args[0]
        encoded = url.rsplit("/", 1)[1]
        assert json.loads(base64.b64decode(encoded)) == {"token_info": {}}

    def test_share_token_balance(self):
        session = lcd_session({"data": {"balance": "42"}})
        token = LcdShareToken(LcdClient(BASE_URL, session=session))
        assert token.query_balance("liquidity0000", "addr0001") == 42

    def test_spot_market(self):
        payload = {
            "market": {
                "market_id": "0x01",
                "ticker": "INJ/USDT",
                "base_denom": "inj",
                "quote_denom": "peggy0xdAC17F958D2ee523a2206206994597C13D831ec7",
                "status": "Active",
            }
        }
        exchange = LcdExchange(LcdClient(BASE_URL, session=lcd_session(payload)))
        market = exchange.query_spot_market("0x01")
        assert market.base_denom == "inj"
        assert market.status == MarketStatus.ACTIVE

    def test_spot_market_not_found(self):
        exchange = LcdExchange(LcdClient(BASE_URL, session=lcd_session(status_code=404)))
        assert exchange.query_spot_market("0x01") is None

    def test_derivative_market_nested(self):
        payload = {
            "market": {
                "market": {
                    "market_id": "0x02",
                    "ticker": "INJ/USDT PERP",
                    "quote_denom": "USDT",
                    "isPerpetual": True,
                    "status": "Paused",
                },
                "mark_price": "1",
            }
        }
        exchange = LcdExchange(LcdClient(BASE_URL, session=lcd_session(payload)))
        market = exchange.query_derivative_market("0x02")
        assert market.quote_denom == "USDT"
        assert market.is_perpetual
        assert market.status == MarketStatus.PAUSED

    def test_unknown_status(self):
        payload = {
            "market": {"market_id": "0x01", "base_denom": "inj", "quote_denom": "usdt", "status": "Weird"}
        }
        exchange = LcdExchange(LcdClient(BASE_URL, session=lcd_session(payload)))
        assert exchange.query_spot_market("0x01").status == MarketStatus.UNSPECIFIED

    def test_pyth_price(self):
        payload = {"price_state": {"price_id": "0xb", "price_state": {"price": "9.5", "timestamp": "1700000000"}}}
        feed = LcdPriceFeed(LcdClient(BASE_URL, session=lcd_session(payload)))
        assert feed.query_pyth_price("0xb") == PriceState(price=Decimal("9.5"), timestamp=1_700_000_000)

    def test_pyth_price_missing(self):
        feed = LcdPriceFeed(LcdClient(BASE_URL, session=lcd_session({"price_state": None})))
        assert feed.query_pyth_price("0xb") is None

    def test_pyth_price_invalid(self):
        payload = {"price_state": {"price_state": {"price": "abc", "timestamp": "1"}}}
        feed = LcdPriceFeed(LcdClient(BASE_URL, session=lcd_session(payload)))
        with pytest.raises(ExternalQueryError):
            feed.query_pyth_price("0xb")

    def test_lcd_gateways_share_client(self):
        gateways = lcd_gateways(BASE_URL, session=lcd_session({}))
        assert isinstance(gateways.bank, LcdBank)
        assert isinstance(gateways.price_feed, LcdPriceFeed)
        assert gateways.bank.client is gateways.exchange.client
