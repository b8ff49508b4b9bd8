"""Vault — учёт пула, жизненный цикл ордеров и асинхронных подтверждений.

- DepositEngine / WithdrawalEngine: выпуск и погашение share
- FeeLedger: сегрегированные fee
- OrderController / ReplyDispatcher: submit → confirm протокол ордеров
- OwnershipStateMachine: двухшаговая передача владения
- Vault: точки входа с атомарностью вызова
"""

from .config import DEFAULT_SETTINGS, VaultSettings
from .contract import Vault
from .deposit import DepositEngine, DepositResult
from .fee_ledger import FeeLedger, tradable_balance, tradable_balances
from .oracle import AssetPrices, PriceOracleAdapter
from .orders import OrderController
from .ownership import OwnershipStateMachine, OwnershipTransition
from .queries import QueryService
from .replies import ReplyDispatcher
from .state import Item, Storage, VaultState
from .withdrawal import WithdrawalEngine

__all__ = [
    "DEFAULT_SETTINGS",
    "VaultSettings",
    "Vault",
    "DepositEngine",
    "DepositResult",
    "FeeLedger",
    "tradable_balance",
    "tradable_balances",
    "AssetPrices",
    "PriceOracleAdapter",
    "OrderController",
    "OwnershipStateMachine",
    "OwnershipTransition",
    "QueryService",
    "ReplyDispatcher",
    "Item",
    "Storage",
    "VaultState",
    "WithdrawalEngine",
]
