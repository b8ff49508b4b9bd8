"""
Messages — входящие сообщения vault

Immutable Pydantic модели для instantiate / execute / query.
Внешняя JSON форма сообщения — объект с единственным ключом-тегом:
    {"deposit": {"assets": [...], "receiver": null}}
parse_execute_msg / parse_query_msg переводят её в типизированную модель.
"""

import base64
import json
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from src.core.domain.asset import Asset, Coin
from src.core.domain.ownership import Expiration
from src.core.domain.vault_config import VenueKind
from src.core.errors import InvalidHookMessage, InvalidMessage, UnsupportedOperation
from src.core.math.fixed_point import UINT128_MAX


# =============================================================================
# INSTANTIATE
# =============================================================================


class InstantiateMsg(BaseModel):
    """
    Параметры создания vault.

    Denom активов берутся из рынка venue; сообщение задаёт только decimals,
    price feed id (SPOT), hardcap и code id share token.
    """

    kind: VenueKind
    owner: str = Field(..., min_length=1)
    market_id: str = Field(..., min_length=1)
    quote_decimal: int = Field(..., ge=0, le=36)
    base_decimal: Optional[int] = Field(None, ge=0, le=36)
    base_price_id: Optional[str] = None
    quote_price_id: Optional[str] = None
    hardcap: int = Field(..., ge=0, le=UINT128_MAX)
    token_code_id: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_spot_fields(self) -> "InstantiateMsg":
        if self.kind == VenueKind.SPOT:
            missing = [
                name
                for name in ("base_decimal", "base_price_id", "quote_price_id")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"spot vault requires {', '.join(missing)}")
        return self


# =============================================================================
# OWNERSHIP ACTIONS
# =============================================================================


class TransferOwnership(BaseModel):
    new_owner: str = Field(..., min_length=1)
    expiry: Optional[Expiration] = None

    model_config = {"frozen": True}


class AcceptOwnership(BaseModel):
    model_config = {"frozen": True}


class RenounceOwnership(BaseModel):
    model_config = {"frozen": True}


OwnershipAction = Union[TransferOwnership, AcceptOwnership, RenounceOwnership]


# =============================================================================
# EXECUTE
# =============================================================================


class UpdateOwnership(BaseModel):
    action: OwnershipAction

    model_config = {"frozen": True}


class Cw20ReceiveMsg(BaseModel):
    """
    Уведомление share token "tokens received with payload".

    msg — base64 JSON hook сообщения; единственный поддерживаемый hook:
    {"withdraw": {}}.
    """

    sender: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, le=UINT128_MAX)
    msg: str = Field(..., description="base64 JSON hook message")

    model_config = {"frozen": True}

    @classmethod
    def withdraw(cls, sender: str, amount: int) -> "Cw20ReceiveMsg":
        payload = base64.b64encode(json.dumps({"withdraw": {}}).encode()).decode()
        return cls(sender=sender, amount=amount, msg=payload)

    def is_withdraw_hook(self) -> bool:
        """
        Декодирование hook сообщения.

        Raises:
            InvalidHookMessage: если payload не является {"withdraw": {}}
        """
        try:
            decoded = json.loads(base64.b64decode(self.msg, validate=True))
        except (ValueError, TypeError) as e:
            raise InvalidHookMessage(f"Error parsing into type Cw20HookMsg: {e}") from e
        if decoded != {"withdraw": {}}:
            raise InvalidHookMessage(
                f"Error parsing into type Cw20HookMsg: unknown variant {decoded!r}"
            )
        return True


class Receive(BaseModel):
    msg: Cw20ReceiveMsg

    model_config = {"frozen": True}


class Deposit(BaseModel):
    assets: list[Asset]
    receiver: Optional[str] = None

    model_config = {"frozen": True}


class SwapSpot(BaseModel):
    buying: bool
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}


class SwapPerpetual(BaseModel):
    long: bool
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    margin: Decimal = Field(..., ge=0)

    model_config = {"frozen": True}


class CancelOrder(BaseModel):
    order_hash: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class AddFee(BaseModel):
    """Начисление fee; denom должны быть активами пула, отсутствующие = 0."""

    fees: list[Coin] = Field(default_factory=list)

    model_config = {"frozen": True}


class WithdrawFee(BaseModel):
    fees: list[Coin] = Field(default_factory=list)

    model_config = {"frozen": True}


ExecuteMsg = Union[
    UpdateOwnership,
    Receive,
    Deposit,
    SwapSpot,
    SwapPerpetual,
    CancelOrder,
    AddFee,
    WithdrawFee,
]


# =============================================================================
# QUERY
# =============================================================================


class OwnershipQuery(BaseModel):
    model_config = {"frozen": True}


class TokensForShares(BaseModel):
    share: int = Field(..., ge=0, le=UINT128_MAX)

    model_config = {"frozen": True}


class TotalLiquidity(BaseModel):
    model_config = {"frozen": True}


class UserLiquidity(BaseModel):
    user: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class Prices(BaseModel):
    model_config = {"frozen": True}


class Tokens(BaseModel):
    model_config = {"frozen": True}


QueryMsg = Union[OwnershipQuery, TokensForShares, TotalLiquidity, UserLiquidity, Prices, Tokens]


# =============================================================================
# EXTERNAL JSON FORM
# =============================================================================

_OWNERSHIP_ACTIONS: dict[str, type[BaseModel]] = {
    "transfer_ownership": TransferOwnership,
    "accept_ownership": AcceptOwnership,
    "renounce_ownership": RenounceOwnership,
}

_EXECUTE_MSGS: dict[str, type[BaseModel]] = {
    "receive": Cw20ReceiveMsg,
    "deposit": Deposit,
    "swap_spot": SwapSpot,
    "swap_perpetual": SwapPerpetual,
    "cancel_order": CancelOrder,
    "add_fee": AddFee,
    "withdraw_fee": WithdrawFee,
}

_QUERY_MSGS: dict[str, type[BaseModel]] = {
    "ownership": OwnershipQuery,
    "tokens_for_shares": TokensForShares,
    "total_liquidity": TotalLiquidity,
    "user_liquidity": UserLiquidity,
    "prices": Prices,
    "tokens": Tokens,
}


def _split_tag(payload: dict[str, Any], registry: dict[str, Any]) -> tuple[str, Any]:
    if not isinstance(payload, dict) or len(payload) != 1:
        raise UnsupportedOperation("message must be an object with exactly one variant key")
    tag, body = next(iter(payload.items()))
    if tag not in registry:
        raise UnsupportedOperation(f"unknown variant `{tag}`")
    return tag, body


def describe_validation_error(error: ValidationError) -> str:
    """Первое нарушение pydantic в виде `loc: msg`."""
    first = error.errors(include_url=False)[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{loc}: {first['msg']}" if loc else first["msg"]


def _validate_body(tag: str, model: type[BaseModel], body: Any) -> BaseModel:
    try:
        return model.model_validate(body or {})
    except ValidationError as e:
        raise InvalidMessage(f"Invalid `{tag}` message: {describe_validation_error(e)}") from e


def parse_execute_msg(payload: dict[str, Any]) -> ExecuteMsg:
    """
    Парсинг execute сообщения из внешней JSON формы.

    Args:
        payload: {"<variant>": {...}}; для update_ownership тело — действие
            ("accept_ownership", "renounce_ownership" или
            {"transfer_ownership": {...}})

    Returns:
        Типизированное сообщение

    Raises:
        UnsupportedOperation: неизвестный вариант
        InvalidMessage: тело не соответствует модели
    """
    if isinstance(payload, dict) and set(payload) == {"update_ownership"}:
        action = payload["update_ownership"]
        if isinstance(action, str):
            action = {action: {}}
        tag, body = _split_tag(action, _OWNERSHIP_ACTIONS)
        return UpdateOwnership(action=_validate_body(tag, _OWNERSHIP_ACTIONS[tag], body))

    tag, body = _split_tag(payload, _EXECUTE_MSGS)
    model = _validate_body(tag, _EXECUTE_MSGS[tag], body)
    if tag == "receive":
        return Receive(msg=model)
    return model


def parse_query_msg(payload: dict[str, Any]) -> QueryMsg:
    """Парсинг query сообщения из внешней JSON формы."""
    tag, body = _split_tag(payload, _QUERY_MSGS)
    return _validate_body(tag, _QUERY_MSGS[tag], body)
