"""Deposit Engine — выпуск share в обмен на активы.

Single-asset (PERPETUAL):
    share = amount                                         если supply == 0
    share = supply_scaled × amount / tradable_scaled        иначе

Dual-asset (SPOT):
    value_i   = amount_i × price_i
    deposit   = min(value_base, value_quote)
    actual_i  = deposit / price_i   (излишек возвращается отправителю)
    share     = Σ actual_i × price_i                                  если supply == 0
    share     = supply_scaled × Σ actual_i × price_i / Σ tradable_i × price_i

Все суммы масштабируются к единицам актива (scaled(-decimals)),
share — к 12 знакам. Каждое умножение / деление усекается до 18 знаков.

Инварианты:
- supply + share ≤ hardcap
- share > 0
- накопленные fee не участвуют в оценке пула
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.adapters.gateways import Gateways
from src.core.domain.asset import (
    Asset,
    AssetInfo,
    Coin,
    addr_opt_validate,
    assert_coins_properly_sent,
    format_assets,
)
from src.core.domain.host import BankSend, Env, MessageInfo, Response
from src.core.domain.messages import Deposit
from src.core.domain.vault_config import PoolAsset, VaultConfig, VenueKind
from src.core.errors import (
    ExceedHardcap,
    InvalidAssetCount,
    InvalidZeroAmount,
    ZeroShareAmount,
)
from src.core.math.fixed_point import (
    checked_sub,
    fp,
    fp_add,
    fp_div,
    fp_mul,
    scaled,
    to_uint,
)
from src.vault.config import VaultSettings
from src.vault.fee_ledger import tradable_balance
from src.vault.oracle import PriceOracleAdapter
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositResult:
    """Расчёт депозита до формирования инструкций."""

    share: int
    accepted: list[Asset]  # фактически принятые суммы (base перед quote)
    refunds: list[Coin]  # ненулевые возвраты (base перед quote)


class DepositEngine:
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

    def deposit(self, env: Env, info: MessageInfo, msg: Deposit) -> Response:
        """
        Депозит активов и mint share получателю.

        Args:
            env: окружение вызова (адрес vault, блок)
            info: отправитель и приложенные средства
            msg: задекларированные активы и опциональный получатель

        Returns:
            Response: mint share, затем (SPOT) возврат излишка одним переводом

        Raises:
            InvalidAssetCount / InvalidDenom / AssetNotInPool / UnexpectedAsset /
            AmountMismatch: активы не соответствуют пулу или приложенным средствам
            InvalidZeroAmount: принятая сумма усекается до нуля
            ZeroShareAmount: share усекается до нуля
            ExceedHardcap: supply + share > hardcap
            StalePrice: (SPOT) цена старше окна актуальности
        """
        config = self.state.load_config()
        amounts = self._validate_assets(config, info, msg.assets)
        token = config.require_share_token()

        if config.kind == VenueKind.SPOT:
            result = self._dual_asset(env, config, token, amounts)
        else:
            result = self._single_asset(env, config, token, amounts)

        if result.share == 0:
            raise ZeroShareAmount()

        receiver = addr_opt_validate(msg.receiver) or info.sender

        total_share = self.gateways.share_token.query_supply(token)
        if total_share + result.share > config.hardcap:
            logger.warning(
                "deposit exceeds hardcap: supply=%s share=%s hardcap=%s",
                total_share,
                result.share,
                config.hardcap,
            )
            raise ExceedHardcap()

        response = Response().add_message(
            self.gateways.share_token.mint_msg(token, receiver, result.share)
        )
        response.add_attributes(
            [
                ("action", "deposit"),
                ("sender", info.sender),
                ("receiver", receiver),
                ("assets", format_assets(result.accepted)),
                ("share", result.share),
            ]
        )
        if result.refunds:
            response.add_message(BankSend(to_address=info.sender, amount=result.refunds))

        logger.info(
            "deposit accepted: sender=%s receiver=%s assets=%s share=%s",
            info.sender,
            receiver,
            format_assets(result.accepted),
            result.share,
        )
        return response

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_assets(
        config: VaultConfig, info: MessageInfo, assets: list[Asset]
    ) -> list[int]:
        """Задекларированные суммы в порядке активов пула."""
        expected = len(config.assets)
        if len(assets) != expected:
            count = "one element" if expected == 1 else "two elements"
            raise InvalidAssetCount(f"assets must contain exactly {count}")

        for asset in assets:
            asset.info.check()

        assert_coins_properly_sent(info.funds, assets, config.denoms)

        amounts = []
        for pool_asset in config.assets:
            pool_info = AssetInfo(denom=pool_asset.denom)
            declared = next((a.amount for a in assets if a.info.equal(pool_info)), None)
            if declared is None:
                raise InvalidAssetCount(
                    f"Asset {pool_asset.denom} is missing from the input asset vector"
                )
            amounts.append(declared)
        return amounts

    # -------------------------------------------------------------------------
    # Single-asset
    # -------------------------------------------------------------------------

    def _single_asset(
        self, env: Env, config: VaultConfig, token: str, amounts: list[int]
    ) -> DepositResult:
        quote = config.quote
        amount = amounts[0]
        scaled_amount = scaled(fp(amount), -quote.decimals)
        if scaled_amount.is_zero():
            raise InvalidZeroAmount()

        total_share = self._total_share_scaled(token)
        if total_share.is_zero():
            share = scaled_amount
        else:
            balance = self._tradable_scaled(env, quote)
            share = fp_div(fp_mul(total_share, scaled_amount), balance)

        return DepositResult(
            share=self._to_share_units(share),
            accepted=[Asset.of(quote.denom, amount)],
            refunds=[],
        )

    # -------------------------------------------------------------------------
    # Dual-asset
    # -------------------------------------------------------------------------

    def _dual_asset(
        self, env: Env, config: VaultConfig, token: str, amounts: list[int]
    ) -> DepositResult:
        prices = self.oracle.get_prices(config, env.block).as_list()
        pool_assets = config.assets

        values = [
            fp_mul(scaled(fp(amount), -asset.decimals), price)
            for amount, asset, price in zip(amounts, pool_assets, prices)
        ]
        deposit_value = min(values)
        actual = [fp_div(deposit_value, price) for price in prices]
        if any(value.is_zero() for value in actual):
            raise InvalidZeroAmount()

        accepted: list[Asset] = []
        refunds: list[Coin] = []
        for declared, value, asset in zip(amounts, actual, pool_assets):
            unscaled = to_uint(scaled(value, asset.decimals))
            refund = checked_sub(declared, unscaled)
            accepted.append(Asset.of(asset.denom, unscaled))
            if refund:
                refunds.append(Coin(denom=asset.denom, amount=refund))

        deposit_total = self._weighted_sum(actual, prices)
        total_share = self._total_share_scaled(token)
        if total_share.is_zero():
            share = deposit_total
        else:
            balances = [self._tradable_scaled(env, asset) for asset in pool_assets]
            pool_total = self._weighted_sum(balances, prices)
            share = fp_div(fp_mul(total_share, deposit_total), pool_total)

        return DepositResult(share=self._to_share_units(share), accepted=accepted, refunds=refunds)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _tradable_scaled(self, env: Env, asset: PoolAsset) -> Decimal:
        raw = tradable_balance(self.gateways.bank, self.state, env.contract_address, asset.denom)
        return scaled(fp(raw), -asset.decimals)

    def _total_share_scaled(self, token: str) -> Decimal:
        supply = self.gateways.share_token.query_supply(token)
        return scaled(fp(supply), -self.settings.share_decimals)

    def _to_share_units(self, share: Decimal) -> int:
        return to_uint(scaled(share, self.settings.share_decimals))

    @staticmethod
    def _weighted_sum(amounts: list[Decimal], prices: list[Decimal]) -> Decimal:
        total = fp(0)
        for amount, price in zip(amounts, prices):
            total = fp_add(total, fp_mul(amount, price))
        return total
