"""Тесты read-only запросов vault."""

from decimal import Decimal

import pytest

from src.core.domain.asset import Asset
from src.core.domain.messages import Prices, Tokens, TokensForShares, TotalLiquidity, UserLiquidity
from src.core.domain.vault_config import VenueKind
from src.core.errors import (
    MathError,
    NotInitialized,
    ShareTokenNotBound,
    StalePrice,
    UnsupportedOperation,
)
from tests.conftest import VaultHarness


@pytest.fixture
def funded_perpetual(perpetual) -> VaultHarness:
    perpetual.set_balance("USDT", 200_000000)
    perpetual.set_fee("USDT", 10_000000)
    perpetual.mint_shares(perpetual.USER, 60_000000000000)
    perpetual.mint_shares("addr0002", 40_000000000000)
    return perpetual


class TestShareQueries:
    def test_tokens_for_shares(self, funded_perpetual):
        assert funded_perpetual.query(TokensForShares(share=50_000000000000)) == [95_000000]

    def test_total_liquidity_excludes_fees(self, funded_perpetual):
        assert funded_perpetual.query(TotalLiquidity()) == [190_000000]

    def test_user_liquidity(self, funded_perpetual):
        assert funded_perpetual.query(UserLiquidity(user=funded_perpetual.USER)) == [
            Asset.of("USDT", 114_000000)
        ]

    def test_user_without_shares(self, funded_perpetual):
        assert funded_perpetual.query({"user_liquidity": {"user": "addr0009"}}) == [
            Asset.of("USDT", 0)
        ]

    def test_spot_lists_follow_pool_order(self, spot):
        spot.set_balance("INJ", 10 * 10**18)
        spot.set_balance("USDT", 90_000000)
        spot.mint_shares(spot.USER, 180_000000000000)
        assert spot.query(TotalLiquidity()) == [10 * 10**18, 90_000000]
        assert spot.query(TokensForShares(share=18_000000000000)) == [10**18, 9_000000]

    def test_zero_supply(self, perpetual):
        with pytest.raises(MathError, match="total share is zero"):
            perpetual.query(TokensForShares(share=1))
        with pytest.raises(MathError):
            perpetual.query(UserLiquidity(user=perpetual.USER))

    def test_unbound_share_token(self):
        harness = VaultHarness(VenueKind.PERPETUAL)
        harness.instantiate()
        with pytest.raises(ShareTokenNotBound):
            harness.query(TokensForShares(share=1))


class TestPrices:
    def test_scaled_to_8_decimals(self, spot):
        spot.set_prices("9.5", "1.000000001")
        assert spot.query(Prices()) == [950000000, 100000000]

    def test_stale(self, spot):
        spot.set_prices("9", "1", timestamp=spot.NOW - 61)
        with pytest.raises(StalePrice):
            spot.query({"prices": {}})

    def test_perpetual(self, perpetual):
        perpetual.ledger.price_feed.set_price(perpetual.BASE_PRICE_ID, Decimal(1), perpetual.NOW)
        with pytest.raises(UnsupportedOperation):
            perpetual.query(Prices())


class TestTokens:
    def test_spot(self, spot):
        assert spot.query(Tokens()) == ["INJ", "USDT"]

    def test_perpetual(self, perpetual):
        assert perpetual.query({"tokens": {}}) == ["USDT"]

    def test_before_instantiate(self):
        harness = VaultHarness(VenueKind.SPOT)
        with pytest.raises(NotInitialized):
            harness.query(Tokens())

    def test_queries_do_not_change_state(self, spot):
        before = spot.vault.state.dump()
        spot.query(Tokens())
        spot.query({"ownership": {}})
        assert spot.vault.state.dump() == before
