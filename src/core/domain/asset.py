"""
Asset — модели активов и проверка приложенных средств

Immutable Pydantic модели:
- Coin: нативная монета (denom + amount), то что реально приложено к вызову
- AssetInfo / Asset: декларация актива в сообщении (info.denom + amount)

Валидация:
- формат denom (символ 3..60 символов)
- формат адреса (нормализованный lowercase bech32-подобный адрес)
- соответствие задекларированных активов приложенным средствам
"""

from typing import Final, Optional, Sequence

from pydantic import BaseModel, Field

from src.core.errors import (
    AmountMismatch,
    AssetNotInPool,
    InvalidAddress,
    InvalidDenom,
    UnexpectedAsset,
)
from src.core.math.fixed_point import UINT128_MAX


# =============================================================================
# CONSTANTS
# =============================================================================

# Максимальная длина denom
DENOM_MAX_LENGTH: Final[int] = 60

# Сколько символов denom попадает в имя LP токена
TOKEN_SYMBOL_MAX_LENGTH: Final[int] = 4

# Минимальная / максимальная длина адреса
ADDRESS_MIN_LENGTH: Final[int] = 3
ADDRESS_MAX_LENGTH: Final[int] = 90


# =============================================================================
# MODELS
# =============================================================================


class Coin(BaseModel):
    """Нативная монета, приложенная к вызову или отправляемая переводом."""

    denom: str = Field(..., min_length=1, description="Denom монеты")
    amount: int = Field(..., ge=0, le=UINT128_MAX, description="Сумма в base units")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class AssetInfo(BaseModel):
    """Идентификация актива пула."""

    denom: str = Field(..., min_length=1, description="Denom актива")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.denom

    def equal(self, other: "AssetInfo") -> bool:
        return self.denom == other.denom

    def check(self) -> None:
        """
        Проверка формата denom.

        Raises:
            InvalidDenom: если denom не соответствует [a-zA-Z0-9-/]{3,60}
        """
        if not is_valid_symbol(self.denom, DENOM_MAX_LENGTH):
            raise InvalidDenom(
                f"Native denom is not in expected format "
                f"[a-zA-Z\\-][3,{DENOM_MAX_LENGTH}]: {self.denom}"
            )


class Asset(BaseModel):
    """Задекларированный актив: info + amount (base units)."""

    info: AssetInfo
    amount: int = Field(..., ge=0, le=UINT128_MAX, description="Сумма в base units")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.amount}{self.info}"

    @classmethod
    def of(cls, denom: str, amount: int) -> "Asset":
        return cls(info=AssetInfo(denom=denom), amount=amount)

    def as_coin(self) -> Coin:
        return Coin(denom=self.info.denom, amount=self.amount)


# =============================================================================
# VALIDATION
# =============================================================================


def is_valid_symbol(symbol: str, max_length: int = 12) -> bool:
    """Проверка символа: длина 3..max_length, только [a-zA-Z0-9-/]."""
    if len(symbol) < 3 or len(symbol) > max_length:
        return False
    for ch in symbol:
        if not (ch.isascii() and (ch.isalnum() or ch in "-/")):
            return False
    return True


def validate_address(address: str) -> str:
    """
    Проверка адреса аккаунта / контракта.

    Адрес должен быть непустым, нормализованным (lowercase) и состоять
    только из ASCII букв и цифр.

    Returns:
        Тот же адрес (для chaining)

    Raises:
        InvalidAddress: если адрес некорректен
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddress("Invalid input: empty address")
    if len(address) < ADDRESS_MIN_LENGTH:
        raise InvalidAddress("Invalid input: human address too short")
    if len(address) > ADDRESS_MAX_LENGTH:
        raise InvalidAddress("Invalid input: human address too long")
    if address.lower() != address:
        raise InvalidAddress("Invalid input: address not normalized")
    if not all(ch.isascii() and ch.isalnum() for ch in address):
        raise InvalidAddress(f"Invalid input: address contains invalid characters: {address}")
    return address


def addr_opt_validate(address: Optional[str]) -> Optional[str]:
    """Валидация опционального адреса (None проходит как None)."""
    if address is None:
        return None
    return validate_address(address)


def assert_coins_properly_sent(
    funds: Sequence[Coin],
    assets: Sequence[Asset],
    pool_denoms: Sequence[str],
) -> None:
    """
    Проверка соответствия задекларированных активов приложенным средствам.

    Порядок проверок:
    1. Каждый задекларированный denom входит в пул
    2. Каждая приложенная монета задекларирована
    3. Для каждого задекларированного актива приложенная сумма равна
       задекларированной (отсутствующая монета считается нулём)

    Args:
        funds: средства, приложенные к вызову
        assets: задекларированные активы
        pool_denoms: denom активов пула

    Raises:
        AssetNotInPool: задекларирован актив не из пула
        UnexpectedAsset: приложена монета, которой нет в декларации
        AmountMismatch: приложенная сумма не совпадает с задекларированной
    """
    pool = set(pool_denoms)
    declared: dict[str, int] = {}
    for asset in assets:
        if asset.info.denom not in pool:
            raise AssetNotInPool(f"Asset {asset.info.denom} is not in the pool")
        declared[asset.info.denom] = asset.amount

    attached: dict[str, int] = {}
    for coin in funds:
        if coin.denom not in declared:
            raise UnexpectedAsset(
                f"Supplied coins contain {coin.denom} that is not in the input asset vector"
            )
        attached[coin.denom] = attached.get(coin.denom, 0) + coin.amount

    for denom, amount in declared.items():
        if attached.get(denom, 0) != amount:
            raise AmountMismatch(
                "Native token balance mismatch between the argument and the transferred"
            )


def format_lp_token_name(*denoms: str) -> str:
    """
    Имя LP токена: первые 4 символа каждого denom, через дефис, + "-LP".

    Examples:
        >>> format_lp_token_name("INJ", "USDT")
        'INJ-USDT-LP'
        >>> format_lp_token_name("peggy0xdAC17")
        'PEGG-LP'
    """
    short = [denom[:TOKEN_SYMBOL_MAX_LENGTH] for denom in denoms]
    return f"{'-'.join(short)}-LP".upper()


def format_assets(assets: Sequence[Asset]) -> str:
    """Формат списка активов для атрибутов ответа: '10INJ, 90USDT'."""
    return ", ".join(str(asset) for asset in assets)
