"""JSON Schema контракты payload асинхронных подтверждений vault."""

from .validators import (
    ContractValidator,
    DerivativeOrderReplyValidator,
    InstantiateTokenReplyValidator,
    SchemaLoader,
    SpotOrderReplyValidator,
    validate_derivative_order_reply,
    validate_instantiate_token_reply,
    validate_spot_order_reply,
)

__all__ = [
    "SchemaLoader",
    "ContractValidator",
    "InstantiateTokenReplyValidator",
    "DerivativeOrderReplyValidator",
    "SpotOrderReplyValidator",
    "validate_instantiate_token_reply",
    "validate_derivative_order_reply",
    "validate_spot_order_reply",
]
