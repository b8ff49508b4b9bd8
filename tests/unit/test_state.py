"""
Тесты персистентного состояния vault.

Coverage:
- Storage snapshot / restore
- Item: JSON сериализация, отсутствующий ключ
- VaultState: write-once share token, счётчики fee, transaction()
"""

import pytest

from src.core.domain.ownership import Expiration, Ownership
from src.core.domain.vault_config import PoolAsset, VaultConfig, VenueKind
from src.core.errors import ExceedHardcap, MathError, NotInitialized, Unauthorized
from src.vault.state import CONFIG, Item, Storage, VaultState


def _spot_config() -> VaultConfig:
    return VaultConfig(
        kind=VenueKind.SPOT,
        market_id="0x01",
        base=PoolAsset(denom="INJ", decimals=18, price_id="0xb"),
        quote=PoolAsset(denom="USDT", decimals=6, price_id="0xq"),
        hardcap=1000,
        subaccount_id="0xsub",
    )


def _perpetual_config() -> VaultConfig:
    return VaultConfig(
        kind=VenueKind.PERPETUAL,
        market_id="0x02",
        quote=PoolAsset(denom="USDT", decimals=6),
        hardcap=1000,
        subaccount_id="0xsub",
    )


@pytest.fixture
def spot_state() -> VaultState:
    state = VaultState()
    config = _spot_config()
    state.save_config(config)
    state.init_fees(config)
    return state


# =============================================================================
# STORAGE / ITEM
# =============================================================================


class TestStorage:
    def test_snapshot_restore(self):
        storage = Storage()
        storage.set("a", b"1")
        snapshot = storage.snapshot()
        storage.set("a", b"2")
        storage.set("b", b"3")
        storage.restore(snapshot)
        assert storage.keys() == ["a"]
        assert storage.get("a") == b"1"

    def test_remove_missing_key(self):
        storage = Storage()
        storage.remove("absent")
        assert storage.get("absent") is None


class TestItem:
    def test_round_trip_model(self):
        storage = Storage()
        config = _spot_config()
        CONFIG.save(storage, config)
        assert CONFIG.load(storage) == config

    def test_round_trip_uint128(self):
        storage = Storage()
        item = Item("counter", int)
        item.save(storage, 2**128 - 1)
        assert item.load(storage) == 2**128 - 1

    def test_missing(self):
        item = Item("counter", int)
        storage = Storage()
        assert item.may_load(storage) is None
        assert not item.exists(storage)
        with pytest.raises(NotInitialized, match="counter not found"):
            item.load(storage)


# =============================================================================
# VAULT STATE
# =============================================================================


class TestConfig:
    def test_uninitialized(self):
        state = VaultState()
        assert not state.is_initialized
        with pytest.raises(NotInitialized):
            state.load_config()

    def test_bind_share_token_once(self, spot_state):
        bound = spot_state.bind_share_token("liquidity0000")
        assert bound.share_token == "liquidity0000"
        assert spot_state.load_config().share_token == "liquidity0000"

        with pytest.raises(Unauthorized):
            spot_state.bind_share_token("liquidity0001")
        assert spot_state.load_config().share_token == "liquidity0000"

    def test_ownership_defaults_to_empty(self):
        assert VaultState().load_ownership() == Ownership()

    def test_ownership_round_trip(self):
        state = VaultState()
        ownership = Ownership(
            owner="addr0000", pending_owner="addr0001", pending_expiry=Expiration(at_time=10)
        )
        state.save_ownership(ownership)
        assert state.load_ownership() == ownership


class TestFeeCounters:
    def test_spot_keys(self, spot_state):
        assert "base_fee_collected" in spot_state.storage.keys()
        assert "quote_fee_collected" in spot_state.storage.keys()
        assert spot_state.load_fees() == {"INJ": 0, "USDT": 0}

    def test_perpetual_key(self):
        state = VaultState()
        config = _perpetual_config()
        state.save_config(config)
        state.init_fees(config)
        state.save_fee("USDT", 7)
        assert state.storage.keys() == ["fee_collected", "vault"]
        assert state.load_fee("USDT") == 7

    def test_fee_order_follows_pool(self, spot_state):
        spot_state.save_fee("USDT", 9)
        spot_state.save_fee("INJ", 1)
        assert list(spot_state.load_fees().items()) == [("INJ", 1), ("USDT", 9)]

    def test_unknown_denom(self, spot_state):
        with pytest.raises(KeyError):
            spot_state.load_fee("ATOM")

    def test_negative_fee_rejected(self, spot_state):
        with pytest.raises(MathError):
            spot_state.save_fee("USDT", -1)


class TestTransaction:
    def test_commit(self, spot_state):
        with spot_state.transaction():
            spot_state.save_fee("USDT", 10)
        assert spot_state.load_fee("USDT") == 10

    def test_rollback_on_error(self, spot_state):
        with pytest.raises(ExceedHardcap):
            with spot_state.transaction():
                spot_state.save_fee("USDT", 10)
                spot_state.bind_share_token("liquidity0000")
                raise ExceedHardcap()
        assert spot_state.load_fee("USDT") == 0
        assert not spot_state.load_config().is_share_token_bound

    def test_dump(self, spot_state):
        dump = spot_state.dump()
        assert dump["quote_fee_collected"] == "0"
        assert '"market_id":"0x01"' in dump["vault"]
