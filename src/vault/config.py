"""Vault Settings — константы и параметры движков vault.

Frozen dataclass, передаётся во все движки (не глобальная конфигурация).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class VaultSettings:
    """Параметры vault.

    - share_decimals: точность share token (12)
    - venue_precision_decimals: масштаб trade results в reply venue (10^18)
    - price_valid_duration_sec: максимальный возраст семпла oracle (60s)
    - price_query_decimals: масштаб цен в query Prices (10^8)
    - correlation ids: 1 — создание share token, 2 — подтверждение ордера
    """

    share_decimals: int = 12
    venue_precision_decimals: int = 18
    price_valid_duration_sec: int = 60
    price_query_decimals: int = 8

    # Share token
    lp_token_symbol: str = "uLP"
    lp_token_label: str = "Vault LP token"

    # Correlation ids
    instantiate_token_reply_id: int = 1
    order_reply_id: int = 2

    # Маска отмены derivative ордера
    derivative_cancel_order_mask: int = 1

    def __post_init__(self):
        if self.instantiate_token_reply_id == self.order_reply_id:
            raise ValueError("correlation ids must be distinct")
        if self.price_valid_duration_sec < 0:
            raise ValueError(
                f"price_valid_duration_sec must be >= 0, got {self.price_valid_duration_sec}"
            )


DEFAULT_SETTINGS = VaultSettings()
