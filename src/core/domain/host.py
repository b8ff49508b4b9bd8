"""
Host — контекст вызова и исходящие инструкции

Host среда сериализует все вызовы к одному vault и атомарно коммитит
изменения состояния вместе с исходящими инструкциями (messages).

Контекст вызова:
- Env: блок (height, time) и собственный адрес vault
- MessageInfo: вызывающий адрес и приложенные средства

Исходящие инструкции (Immutable Pydantic):
- BankSend: перевод нативных монет
- WasmExecute / WasmInstantiate: вызов / создание контракта (share token)
- биржевые инструкции — см. exchange.py

Асинхронные подтверждения:
- SubMsg с reply_on и correlation id
- Reply / SubMsgResult — доставка подтверждения отдельным вызовом
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from src.core.domain.asset import Coin
from src.core.domain.exchange import (
    BatchUpdateOrders,
    CancelDerivativeOrder,
    CancelSpotOrder,
    CreateDerivativeMarketOrder,
)


# =============================================================================
# CALL CONTEXT
# =============================================================================


@dataclass(frozen=True)
class BlockInfo:
    """Информация о блоке, в котором исполняется вызов."""

    height: int
    time: int  # Unix timestamp, секунды
    chain_id: str = "injective-1"


@dataclass(frozen=True)
class Env:
    """Окружение вызова."""

    block: BlockInfo
    contract_address: str


@dataclass(frozen=True)
class MessageInfo:
    """Вызывающий адрес и приложенные к вызову средства."""

    sender: str
    funds: tuple[Coin, ...] = ()


# =============================================================================
# OUTBOUND MESSAGES
# =============================================================================


class BankSend(BaseModel):
    """Перевод нативных монет."""

    to_address: str = Field(..., min_length=1)
    amount: list[Coin] = Field(..., min_length=1)

    model_config = {"frozen": True}


class WasmExecute(BaseModel):
    """Вызов контракта (например, mint/burn share token)."""

    contract_addr: str = Field(..., min_length=1)
    msg: dict[str, Any]
    funds: list[Coin] = Field(default_factory=list)

    model_config = {"frozen": True}


class WasmInstantiate(BaseModel):
    """Создание контракта из загруженного code id."""

    code_id: int = Field(..., ge=0)
    msg: dict[str, Any]
    funds: list[Coin] = Field(default_factory=list)
    admin: Optional[str] = None
    label: str = Field(..., min_length=1)

    model_config = {"frozen": True}


CosmosMsg = Union[
    BankSend,
    WasmExecute,
    WasmInstantiate,
    BatchUpdateOrders,
    CreateDerivativeMarketOrder,
    CancelSpotOrder,
    CancelDerivativeOrder,
]


class ReplyOn(str, Enum):
    """Когда host доставляет reply на sub-message."""

    NEVER = "never"
    SUCCESS = "success"
    ERROR = "error"
    ALWAYS = "always"


@dataclass(frozen=True)
class SubMsg:
    """Исходящая инструкция с (опциональным) ожиданием reply."""

    msg: CosmosMsg
    id: int = 0
    reply_on: ReplyOn = ReplyOn.NEVER

    @classmethod
    def new(cls, msg: CosmosMsg) -> "SubMsg":
        """Fire-and-forget инструкция (reply не ожидается)."""
        return cls(msg=msg)

    @classmethod
    def reply_on_success(cls, msg: CosmosMsg, reply_id: int) -> "SubMsg":
        return cls(msg=msg, id=reply_id, reply_on=ReplyOn.SUCCESS)


# =============================================================================
# RESPONSE
# =============================================================================


@dataclass
class Response:
    """
    Результат вызова: исходящие инструкции + атрибуты (observability output).

    Host исполняет messages по порядку; сбой любой инструкции откатывает
    весь вызов, включая ожидаемый reply.
    """

    messages: list[SubMsg] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def add_message(self, msg: CosmosMsg) -> "Response":
        self.messages.append(SubMsg.new(msg))
        return self

    def add_submessage(self, sub_msg: SubMsg) -> "Response":
        self.messages.append(sub_msg)
        return self

    def add_attribute(self, key: str, value: Any) -> "Response":
        self.attributes.append((key, str(value)))
        return self

    def add_attributes(self, pairs: list[tuple[str, Any]]) -> "Response":
        for key, value in pairs:
            self.add_attribute(key, value)
        return self

    def attribute(self, key: str) -> Optional[str]:
        """Первое значение атрибута по ключу (None если отсутствует)."""
        for k, v in self.attributes:
            if k == key:
                return v
        return None


# =============================================================================
# REPLY
# =============================================================================


@dataclass(frozen=True)
class SubMsgResult:
    """Результат sub-message: либо data (успех), либо текст ошибки."""

    data: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data: Optional[bytes]) -> "SubMsgResult":
        return cls(data=data)

    @classmethod
    def err(cls, error: str) -> "SubMsgResult":
        return cls(error=error)


@dataclass(frozen=True)
class Reply:
    """Подтверждение sub-message, доставленное отдельным вызовом."""

    id: int
    result: SubMsgResult
