"""
LCD gateways — read-only реализация коллабораторов через REST LCD узла

Запросы:
- bank:        GET /cosmos/bank/v1beta1/balances/{address}/by_denom?denom=...
- share token: GET /cosmwasm/wasm/v1/contract/{token}/smart/{base64(query)}
- spot:        GET /injective/exchange/v1beta1/spot/markets/{market_id}
- derivative:  GET /injective/exchange/v1beta1/derivative/markets/{market_id}
- oracle:      GET /injective/oracle/v1beta1/pyth_price/{price_id}

Инструкции (mint / burn / ордера) строятся базовыми классами gateways и
исполняются host'ом: этот модуль ничего не отправляет в сеть, кроме GET.

Любой сетевой сбой или неожиданный ответ → ExternalQueryError.
Повторов нет.
"""

import base64
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import requests

from src.adapters.gateways import (
    BankGateway,
    ExchangeGateway,
    Gateways,
    PriceFeedGateway,
    ShareTokenGateway,
)
from src.core.domain.exchange import DerivativeMarket, MarketStatus, PriceState, SpotMarket
from src.core.errors import ExternalQueryError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0


class LcdClient:
    """Тонкий GET клиент поверх requests.Session."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        GET запрос к LCD.

        Args:
            path: путь относительно base_url
            params: query параметры
            allow_not_found: вернуть None на 404 вместо ошибки

        Raises:
            ExternalQueryError: сетевой сбой, HTTP ошибка, не-JSON ответ
        """
        url = f"{self.base_url}{path}"
        logger.debug("LCD GET %s params=%s", url, params)
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ExternalQueryError(f"LCD request failed: {url}: {e}") from e

        if allow_not_found and resp.status_code == 404:
            return None
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise ExternalQueryError(f"LCD error {resp.status_code}: {url}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise ExternalQueryError(f"LCD returned non-JSON body: {url}") from e


def _field(payload: Optional[Dict[str, Any]], *path: str) -> Any:
    """Вложенное поле ответа; отсутствие → ExternalQueryError."""
    node: Any = payload
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise ExternalQueryError(f"Unexpected LCD response: missing {'.'.join(path)}")
        node = node[key]
    return node


def _to_int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ExternalQueryError(f"Invalid {what}: {value!r}") from e


# =============================================================================
# GATEWAYS
# =============================================================================


class LcdBank(BankGateway):
    def __init__(self, client: LcdClient):
        self.client = client

    def query_balance(self, address: str, denom: str) -> int:
        data = self.client.get(
            f"/cosmos/bank/v1beta1/balances/{address}/by_denom", params={"denom": denom}
        )
        return _to_int(_field(data, "balance", "amount"), "balance amount")


class LcdShareToken(ShareTokenGateway):
    def __init__(self, client: LcdClient):
        self.client = client

    def _smart_query(self, token: str, query: Dict[str, Any]) -> Dict[str, Any]:
        encoded = base64.b64encode(json.dumps(query).encode()).decode()
        data = self.client.get(f"/cosmwasm/wasm/v1/contract/{token}/smart/{encoded}")
        return _field(data, "data")

    def query_supply(self, token: str) -> int:
        info = self._smart_query(token, {"token_info": {}})
        return _to_int(_field(info, "total_supply"), "total supply")

    def query_balance(self, token: str, address: str) -> int:
        data = self._smart_query(token, {"balance": {"address": address}})
        return _to_int(_field(data, "balance"), "share balance")


class LcdExchange(ExchangeGateway):
    def __init__(self, client: LcdClient):
        self.client = client

    def query_spot_market(self, market_id: str) -> Optional[SpotMarket]:
        data = self.client.get(
            f"/injective/exchange/v1beta1/spot/markets/{market_id}", allow_not_found=True
        )
        if data is None or not data.get("market"):
            return None
        market = data["market"]
        return SpotMarket(
            market_id=_field(market, "market_id"),
            ticker=market.get("ticker", ""),
            base_denom=_field(market, "base_denom"),
            quote_denom=_field(market, "quote_denom"),
            status=_status(market.get("status")),
        )

    def query_derivative_market(self, market_id: str) -> Optional[DerivativeMarket]:
        data = self.client.get(
            f"/injective/exchange/v1beta1/derivative/markets/{market_id}", allow_not_found=True
        )
        full_market = (data or {}).get("market")
        if not full_market or not full_market.get("market"):
            return None
        market = full_market["market"]
        return DerivativeMarket(
            market_id=_field(market, "market_id"),
            ticker=market.get("ticker", ""),
            quote_denom=_field(market, "quote_denom"),
            is_perpetual=bool(market.get("isPerpetual", market.get("is_perpetual", True))),
            status=_status(market.get("status")),
        )


class LcdPriceFeed(PriceFeedGateway):
    def __init__(self, client: LcdClient):
        self.client = client

    def query_pyth_price(self, price_id: str) -> Optional[PriceState]:
        data = self.client.get(
            f"/injective/oracle/v1beta1/pyth_price/{price_id}", allow_not_found=True
        )
        wrapper = (data or {}).get("price_state")
        if not wrapper or not wrapper.get("price_state"):
            return None
        state = wrapper["price_state"]
        try:
            price = Decimal(str(_field(state, "price")))
        except InvalidOperation as e:
            raise ExternalQueryError(f"Invalid price for {price_id}: {state.get('price')!r}") from e
        return PriceState(price=price, timestamp=_to_int(_field(state, "timestamp"), "timestamp"))


def _status(value: Any) -> MarketStatus:
    try:
        return MarketStatus(value)
    except ValueError:
        return MarketStatus.UNSPECIFIED


def lcd_gateways(base_url: str, session: Optional[requests.Session] = None) -> Gateways:
    """Все gateways поверх одного LCD клиента."""
    client = LcdClient(base_url, session=session)
    return Gateways(
        bank=LcdBank(client),
        share_token=LcdShareToken(client),
        exchange=LcdExchange(client),
        price_feed=LcdPriceFeed(client),
    )
