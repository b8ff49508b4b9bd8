"""Vault State — персистентное состояние vault.

Storage: key/value хранилище (bytes) с snapshot/restore.
Item: типизированная ячейка storage с JSON сериализацией (pydantic TypeAdapter).
VaultState: явный handle состояния, передаётся во все движки.

Ключи:
- "vault": VaultConfig
- "ownership": Ownership
- "fee_collected" (PERPETUAL) / "base_fee_collected", "quote_fee_collected" (SPOT)
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, Optional, Type, TypeVar

from pydantic import TypeAdapter

from src.core.domain.ownership import Ownership
from src.core.domain.vault_config import VaultConfig, VenueKind
from src.core.errors import NotInitialized, Unauthorized
from src.core.math.fixed_point import check_uint128

T = TypeVar("T")


# =============================================================================
# STORAGE
# =============================================================================


class Storage:
    """In-memory key/value storage."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)

    def snapshot(self) -> Dict[str, bytes]:
        # bytes immutable: поверхностной копии достаточно
        return dict(self._data)

    def restore(self, snapshot: Dict[str, bytes]) -> None:
        self._data = dict(snapshot)


class Item(Generic[T]):
    """Типизированная ячейка storage."""

    def __init__(self, key: str, type_: Type[T]):
        self.key = key
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def may_load(self, storage: Storage) -> Optional[T]:
        raw = storage.get(self.key)
        if raw is None:
            return None
        return self._adapter.validate_json(raw)

    def load(self, storage: Storage) -> T:
        """
        Raises:
            NotInitialized: если ключ отсутствует
        """
        value = self.may_load(storage)
        if value is None:
            raise NotInitialized(f"{self.key} not found")
        return value

    def save(self, storage: Storage, value: T) -> None:
        storage.set(self.key, self._adapter.dump_json(value))

    def exists(self, storage: Storage) -> bool:
        return storage.get(self.key) is not None


# =============================================================================
# VAULT STATE
# =============================================================================

CONFIG: Item[VaultConfig] = Item("vault", VaultConfig)
OWNERSHIP: Item[Ownership] = Item("ownership", Ownership)

FEE_COLLECTED: Item[int] = Item("fee_collected", int)
BASE_FEE_COLLECTED: Item[int] = Item("base_fee_collected", int)
QUOTE_FEE_COLLECTED: Item[int] = Item("quote_fee_collected", int)


class VaultState:
    """
    Handle состояния одного vault.

    Все изменения идут через этот объект; атомарность вызова обеспечивает
    transaction() (snapshot до вызова, restore при исключении).
    """

    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or Storage()

    # -------------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return CONFIG.exists(self.storage)

    def load_config(self) -> VaultConfig:
        return CONFIG.load(self.storage)

    def save_config(self, config: VaultConfig) -> None:
        CONFIG.save(self.storage, config)

    def bind_share_token(self, address: str) -> VaultConfig:
        """
        Привязка адреса share token (ровно один раз).

        Raises:
            Unauthorized: если адрес уже привязан
        """
        config = self.load_config()
        if config.is_share_token_bound:
            raise Unauthorized()
        bound = config.model_copy(update={"share_token": address})
        self.save_config(bound)
        return bound

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------

    def load_ownership(self) -> Ownership:
        return OWNERSHIP.may_load(self.storage) or Ownership()

    def save_ownership(self, ownership: Ownership) -> None:
        OWNERSHIP.save(self.storage, ownership)

    # -------------------------------------------------------------------------
    # Fee counters
    # -------------------------------------------------------------------------

    def _fee_item(self, config: VaultConfig, denom: str) -> Item[int]:
        if config.kind == VenueKind.PERPETUAL:
            if denom == config.quote.denom:
                return FEE_COLLECTED
        elif config.base is not None and denom == config.base.denom:
            return BASE_FEE_COLLECTED
        elif denom == config.quote.denom:
            return QUOTE_FEE_COLLECTED
        raise KeyError(denom)

    def init_fees(self, config: VaultConfig) -> None:
        for asset in config.assets:
            self._fee_item(config, asset.denom).save(self.storage, 0)

    def load_fee(self, denom: str) -> int:
        config = self.load_config()
        return self._fee_item(config, denom).load(self.storage)

    def save_fee(self, denom: str, amount: int) -> None:
        config = self.load_config()
        self._fee_item(config, denom).save(self.storage, check_uint128(amount))

    def load_fees(self) -> Dict[str, int]:
        """Все счётчики fee в порядке активов пула (base перед quote)."""
        config = self.load_config()
        return {
            asset.denom: self._fee_item(config, asset.denom).load(self.storage)
            for asset in config.assets
        }

    # -------------------------------------------------------------------------
    # Atomicity
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["VaultState"]:
        """
        Атомарный вызов: любое исключение внутри блока откатывает storage.

        Пример:
            with state.transaction():
                state.save_fee(denom, 10)
                raise ExceedHardcap()  # счётчик fee не изменится
        """
        snapshot = self.storage.snapshot()
        try:
            yield self
        except BaseException:
            self.storage.restore(snapshot)
            raise

    def dump(self) -> Dict[str, Any]:
        """Снимок состояния для диагностики (ключ → JSON текст)."""
        return {key: self.storage.get(key).decode() for key in self.storage.keys()}
