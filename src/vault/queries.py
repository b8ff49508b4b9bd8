"""Query Service — read-only запросы к vault.

Все share-пропорциональные запросы используют tradable balance
(raw − fee) и текущий supply share token.
"""

from typing import Any, Dict

from src.adapters.gateways import Gateways
from src.core.domain.asset import Asset
from src.core.domain.host import Env
from src.core.errors import MathError
from src.core.math.fixed_point import multiply_ratio, scaled, to_uint
from src.vault.config import VaultSettings
from src.vault.fee_ledger import tradable_balances
from src.vault.oracle import PriceOracleAdapter
from src.vault.ownership import describe
from src.vault.state import VaultState


class QueryService:
    def __init__(
        self,
        state: VaultState,
        gateways: Gateways,
        oracle: PriceOracleAdapter,
        settings: VaultSettings,
    ):
        self.state = state
        self.gateways = gateways
        self.oracle = oracle
        self.settings = settings

    def ownership(self) -> Dict[str, Any]:
        return describe(self.state.load_ownership())

    def tokens_for_shares(self, env: Env, share: int) -> list[int]:
        """Суммы активов (base перед quote), соответствующие share."""
        total_share = self._total_share()
        balances = tradable_balances(self.gateways.bank, self.state, env.contract_address)
        return [multiply_ratio(balance, share, total_share) for balance in balances.values()]

    def total_liquidity(self, env: Env) -> list[int]:
        return list(tradable_balances(self.gateways.bank, self.state, env.contract_address).values())

    def user_liquidity(self, env: Env, user: str) -> list[Asset]:
        """Доля пользователя в каждом активе по его балансу share."""
        config = self.state.load_config()
        total_share = self._total_share()
        share = self.gateways.share_token.query_balance(config.share_token, user)
        balances = tradable_balances(self.gateways.bank, self.state, env.contract_address)
        return [
            Asset.of(denom, multiply_ratio(balance, share, total_share))
            for denom, balance in balances.items()
        ]

    def prices(self, env: Env) -> list[int]:
        """Цены base / quote, масштабированные на 10^8 (только SPOT)."""
        config = self.state.load_config()
        prices = self.oracle.get_prices(config, env.block)
        return [
            to_uint(scaled(price, self.settings.price_query_decimals))
            for price in prices.as_list()
        ]

    def tokens(self) -> list[str]:
        return self.state.load_config().denoms

    def _total_share(self) -> int:
        token = self.state.load_config().require_share_token()
        total_share = self.gateways.share_token.query_supply(token)
        if total_share == 0:
            raise MathError("total share is zero")
        return total_share
