"""Fee Ledger — сегрегированные счётчики накопленных fee.

Накопленные fee не принадлежат держателям share:
tradable balance = raw balance (bank) − fee counter.

Операции:
- add: owner-gated инкремент счётчиков
- withdraw: owner-gated декремент + один bank перевод владельцу
"""

import logging
from typing import Dict, Sequence

from src.adapters.gateways import BankGateway
from src.core.domain.asset import Asset, Coin, format_assets
from src.core.domain.host import BankSend, Response
from src.core.domain.vault_config import VaultConfig
from src.core.errors import AssetNotInPool, InsufficientFee, MathError, ZeroFeeWithdrawal
from src.core.math.fixed_point import check_uint128
from src.vault.ownership import OwnershipStateMachine
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


def tradable_balance(
    bank: BankGateway, state: VaultState, vault_address: str, denom: str
) -> int:
    """
    Баланс, принадлежащий держателям share.

    Raises:
        MathError: если raw баланс меньше накопленного fee
    """
    raw = bank.query_balance(vault_address, denom)
    fee = state.load_fee(denom)
    if fee > raw:
        raise MathError(f"Cannot Sub with {raw} and {fee}")
    return raw - fee


def tradable_balances(bank: BankGateway, state: VaultState, vault_address: str) -> Dict[str, int]:
    """Tradable balance каждого актива пула (base перед quote)."""
    config = state.load_config()
    return {
        denom: tradable_balance(bank, state, vault_address, denom) for denom in config.denoms
    }


class FeeLedger:
    def __init__(self, state: VaultState, ownership: OwnershipStateMachine):
        self.state = state
        self.ownership = ownership

    def add(self, sender: str, fees: Sequence[Coin]) -> Response:
        """
        Начисление fee (owner only).

        Raises:
            Unauthorized: sender не owner
            AssetNotInPool: denom не является активом пула
        """
        self.ownership.assert_owner(sender)
        config = self.state.load_config()
        amounts = self._per_asset(config, fees)

        counters = self.state.load_fees()
        for denom, amount in amounts.items():
            self.state.save_fee(denom, check_uint128(counters[denom] + amount))

        logger.info("fee added: %s", amounts)
        return Response().add_attributes(
            [("action", "add_fee"), ("fee_added", format_assets(_as_assets(amounts)))]
        )

    def withdraw(self, sender: str, fees: Sequence[Coin]) -> Response:
        """
        Вывод накопленных fee владельцу (owner only).

        Raises:
            Unauthorized: sender не owner
            ZeroFeeWithdrawal: все запрошенные суммы нулевые
            InsufficientFee: запрошено больше накопленного хотя бы по одному активу
        """
        self.ownership.assert_owner(sender)
        config = self.state.load_config()
        amounts = self._per_asset(config, fees)

        if all(amount == 0 for amount in amounts.values()):
            raise ZeroFeeWithdrawal()

        counters = self.state.load_fees()
        if any(amount > counters[denom] for denom, amount in amounts.items()):
            raise InsufficientFee()

        for denom, amount in amounts.items():
            self.state.save_fee(denom, counters[denom] - amount)

        coins = [Coin(denom=denom, amount=amount) for denom, amount in amounts.items() if amount]
        logger.info("fee withdrawn by %s: %s", sender, amounts)
        return (
            Response()
            .add_message(BankSend(to_address=sender, amount=coins))
            .add_attribute("fee_withdrawn", format_assets(_as_assets(amounts)))
        )

    @staticmethod
    def _per_asset(config: VaultConfig, fees: Sequence[Coin]) -> Dict[str, int]:
        """Суммы по активам пула в порядке пула; отсутствующие = 0."""
        amounts = {denom: 0 for denom in config.denoms}
        for coin in fees:
            if coin.denom not in amounts:
                raise AssetNotInPool(f"Asset {coin.denom} is not in the pool")
            amounts[coin.denom] = check_uint128(amounts[coin.denom] + coin.amount)
        return amounts


def _as_assets(amounts: Dict[str, int]) -> list[Asset]:
    return [Asset.of(denom, amount) for denom, amount in amounts.items()]
