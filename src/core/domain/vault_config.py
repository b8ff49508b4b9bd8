"""
VaultConfig — персистентная конфигурация vault

Immutable Pydantic модель (singleton в storage).

Инварианты:
- SPOT (dual-asset): base + quote активы, два price feed id
- PERPETUAL (single-asset): только quote актив
- share_token: пустая строка до reply о создании токена, затем привязывается
  ровно один раз (write-once)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.core.errors import ShareTokenNotBound
from src.core.math.fixed_point import UINT128_MAX


# =============================================================================
# ENUMS
# =============================================================================


class VenueKind(str, Enum):
    """Вид торговой площадки vault"""

    SPOT = "spot"  # dual-asset
    PERPETUAL = "perpetual"  # single-asset (margin)


# =============================================================================
# NESTED MODELS
# =============================================================================


class PoolAsset(BaseModel):
    """Актив пула: denom + decimals (+ price feed id для SPOT)."""

    denom: str = Field(..., min_length=1)
    decimals: int = Field(..., ge=0, le=36)
    price_id: Optional[str] = None

    model_config = {"frozen": True}


# =============================================================================
# VAULT CONFIG
# =============================================================================


class VaultConfig(BaseModel):
    """
    Конфигурация vault.

    Создаётся при instantiate (рынок должен существовать и быть активным).
    Единственное изменяемое поле — share_token (unset → bound, один раз).
    """

    kind: VenueKind
    market_id: str = Field(..., min_length=1, description="Идентификатор рынка на venue")
    base: Optional[PoolAsset] = Field(None, description="Базовый актив (только SPOT)")
    quote: PoolAsset = Field(..., description="Котируемый актив")
    hardcap: int = Field(..., ge=0, le=UINT128_MAX, description="Максимум share (raw units)")
    share_token: str = Field("", description="Адрес share token ('' пока не привязан)")
    subaccount_id: str = Field(..., min_length=1, description="Trading identity на venue")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_assets_by_kind(self) -> "VaultConfig":
        if self.kind == VenueKind.SPOT:
            if self.base is None:
                raise ValueError("spot vault requires a base asset")
            if self.base.price_id is None or self.quote.price_id is None:
                raise ValueError("spot vault requires price feed ids for both assets")
            if self.base.denom == self.quote.denom:
                raise ValueError("base and quote denoms must differ")
        elif self.base is not None:
            raise ValueError("perpetual vault has no base asset")
        return self

    @property
    def assets(self) -> list[PoolAsset]:
        """Активы пула в фиксированном порядке (base перед quote)."""
        if self.base is not None:
            return [self.base, self.quote]
        return [self.quote]

    @property
    def denoms(self) -> list[str]:
        return [asset.denom for asset in self.assets]

    @property
    def is_share_token_bound(self) -> bool:
        return self.share_token != ""

    def require_share_token(self) -> str:
        """
        Адрес share token.

        Raises:
            ShareTokenNotBound: если reply о создании токена ещё не получен
        """
        if not self.is_share_token_bound:
            raise ShareTokenNotBound()
        return self.share_token
