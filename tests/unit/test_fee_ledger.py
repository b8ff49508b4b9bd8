"""Тесты сегрегированного учёта fee (AddFee / WithdrawFee / tradable balance)."""

import pytest

from src.core.domain.asset import Coin
from src.core.domain.host import BankSend
from src.core.domain.messages import AddFee, WithdrawFee
from src.core.errors import (
    AssetNotInPool,
    InsufficientFee,
    MathError,
    Unauthorized,
    ZeroFeeWithdrawal,
)
from src.vault.fee_ledger import tradable_balance, tradable_balances


def usdt(amount: int) -> Coin:
    return Coin(denom="USDT", amount=amount)


def inj(amount: int) -> Coin:
    return Coin(denom="INJ", amount=amount)


class TestTradableBalance:
    def test_raw_minus_fee(self, perpetual):
        perpetual.set_balance("USDT", 200_000000)
        perpetual.set_fee("USDT", 10_000000)
        balance = tradable_balance(
            perpetual.ledger.bank, perpetual.vault.state, perpetual.CONTRACT, "USDT"
        )
        assert balance == 190_000000

    def test_fee_above_raw(self, perpetual):
        perpetual.set_balance("USDT", 5)
        perpetual.set_fee("USDT", 6)
        with pytest.raises(MathError, match="Cannot Sub with 5 and 6"):
            tradable_balance(
                perpetual.ledger.bank, perpetual.vault.state, perpetual.CONTRACT, "USDT"
            )

    def test_pool_order(self, spot):
        spot.set_balance("USDT", 90_000000)
        spot.set_balance("INJ", 10 * 10**18)
        spot.set_fee("INJ", 10**18)
        balances = tradable_balances(spot.ledger.bank, spot.vault.state, spot.CONTRACT)
        assert list(balances.items()) == [("INJ", 9 * 10**18), ("USDT", 90_000000)]


class TestAddFee:
    def test_add(self, perpetual):
        response = perpetual.execute(perpetual.OWNER, AddFee(fees=[usdt(10)]))
        assert perpetual.vault.state.load_fee("USDT") == 10
        assert response.attribute("action") == "add_fee"
        assert response.attribute("fee_added") == "10USDT"
        assert response.messages == []

    def test_accumulates(self, spot):
        spot.execute(spot.OWNER, AddFee(fees=[inj(1), usdt(2)]))
        spot.execute(spot.OWNER, AddFee(fees=[usdt(3)]))
        assert spot.vault.state.load_fees() == {"INJ": 1, "USDT": 5}

    def test_owner_only(self, perpetual):
        with pytest.raises(Unauthorized):
            perpetual.execute(perpetual.USER, AddFee(fees=[usdt(10)]))
        assert perpetual.vault.state.load_fee("USDT") == 0

    def test_asset_not_in_pool(self, perpetual):
        with pytest.raises(AssetNotInPool):
            perpetual.execute(perpetual.OWNER, AddFee(fees=[inj(10)]))

    def test_overflow_rolls_back_all_counters(self, spot):
        spot.set_fee("USDT", 2**128 - 1)
        with pytest.raises(MathError):
            spot.execute(spot.OWNER, AddFee(fees=[inj(5), usdt(1)]))
        assert spot.vault.state.load_fees() == {"INJ": 0, "USDT": 2**128 - 1}


class TestWithdrawFee:
    def test_partial_withdraw(self, perpetual):
        perpetual.set_balance("USDT", 200_000000)
        perpetual.set_fee("USDT", 10_000000)

        response = perpetual.execute(perpetual.OWNER, WithdrawFee(fees=[usdt(4_000000)]))

        assert perpetual.vault.state.load_fee("USDT") == 6_000000
        [sub_msg] = response.messages
        assert sub_msg.msg == BankSend(to_address=perpetual.OWNER, amount=[usdt(4_000000)])
        assert response.attribute("fee_withdrawn") == "4000000USDT"

    def test_single_transfer_skips_zero_assets(self, spot):
        spot.set_fee("INJ", 10**18)
        spot.set_fee("USDT", 9_000000)

        response = spot.execute(spot.OWNER, WithdrawFee(fees=[usdt(9_000000)]))

        [sub_msg] = response.messages
        assert sub_msg.msg.amount == [usdt(9_000000)]
        assert response.attribute("fee_withdrawn") == "0INJ, 9000000USDT"
        assert spot.vault.state.load_fees() == {"INJ": 10**18, "USDT": 0}

    def test_both_assets_in_one_transfer(self, spot):
        spot.set_fee("INJ", 10**18)
        spot.set_fee("USDT", 9_000000)
        response = spot.execute(spot.OWNER, WithdrawFee(fees=[usdt(1), inj(2)]))
        [sub_msg] = response.messages
        assert sub_msg.msg.amount == [inj(2), usdt(1)]

    @pytest.mark.parametrize("fees", [[], [usdt(0)]])
    def test_zero_withdrawal(self, perpetual, fees):
        perpetual.set_fee("USDT", 10)
        with pytest.raises(ZeroFeeWithdrawal, match="Can't withdraw zero fees"):
            perpetual.execute(perpetual.OWNER, WithdrawFee(fees=fees))

    def test_insufficient(self, spot):
        spot.set_fee("INJ", 10)
        spot.set_fee("USDT", 10)
        with pytest.raises(InsufficientFee):
            spot.execute(spot.OWNER, WithdrawFee(fees=[inj(5), usdt(11)]))
        assert spot.vault.state.load_fees() == {"INJ": 10, "USDT": 10}

    def test_owner_checked_first(self, perpetual):
        with pytest.raises(Unauthorized):
            perpetual.execute(perpetual.USER, WithdrawFee(fees=[]))
