"""
Vault Errors — иерархия ошибок vault

Каждая ошибка прерывает вызов целиком (без частичной записи состояния).
Ошибки разделены на три вида (ErrorKind), чтобы оператор мог отличить
отказ валидации от отказа авторизации и от асинхронных сбоев host/venue:

- VALIDATION: некорректный запрос (активы, суммы, hardcap, устаревшая цена, ...)
- AUTHORIZATION: вызывающий не имеет права на операцию
- ASYNC: сбой внешнего sub-call, нераспознанный reply, ошибка декодирования reply

Внутренних повторов (retry) нет: повтор — ответственность клиента.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Вид ошибки"""

    VALIDATION = "VALIDATION"
    AUTHORIZATION = "AUTHORIZATION"
    ASYNC = "ASYNC"


# =============================================================================
# BASE
# =============================================================================


class VaultError(Exception):
    """
    Базовая ошибка vault.

    Attributes:
        kind: вид ошибки (VALIDATION / AUTHORIZATION / ASYNC)
        code: стабильный машиночитаемый код
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    code: str = "vault_error"

    def __init__(self, message: str = ""):
        self.message = message or self.code
        super().__init__(self.message)


# =============================================================================
# VALIDATION
# =============================================================================


class MarketNotFound(VaultError):
    code = "market_not_found"


class MarketNotActive(VaultError):
    code = "market_not_active"


class InvalidAssetCount(VaultError):
    code = "invalid_asset_count"


class InvalidDenom(VaultError):
    code = "invalid_denom"


class AssetNotInPool(VaultError):
    code = "asset_not_in_pool"


class UnexpectedAsset(VaultError):
    """Приложенные средства содержат denom, которого нет в списке активов."""

    code = "unexpected_asset"


class AmountMismatch(VaultError):
    code = "amount_mismatch"


class InvalidAddress(VaultError):
    code = "invalid_address"


class InvalidZeroAmount(VaultError):
    code = "invalid_zero_amount"

    def __init__(self, message: str = "InvalidZeroAmount"):
        super().__init__(message)


class ZeroShareAmount(VaultError):
    code = "zero_share_amount"

    def __init__(self, message: str = "Zero share amount"):
        super().__init__(message)


class ExceedHardcap(VaultError):
    code = "exceed_hardcap"

    def __init__(self, message: str = "ExceedHardcap"):
        super().__init__(message)


class InsufficientFee(VaultError):
    code = "insufficient_fee"

    def __init__(self, message: str = "Insufficient fee accrued"):
        super().__init__(message)


class ZeroFeeWithdrawal(VaultError):
    code = "zero_fee_withdrawal"

    def __init__(self, message: str = "Can't withdraw zero fees"):
        super().__init__(message)


class StalePrice(VaultError):
    code = "stale_price"

    def __init__(self, message: str = "Price too old"):
        super().__init__(message)


class InsufficientBalance(VaultError):
    code = "insufficient_balance"


class FundsNotAllowed(VaultError):
    code = "funds_not_allowed"

    def __init__(self, message: str = "Do not provide funds!"):
        super().__init__(message)


class UnsupportedOperation(VaultError):
    code = "unsupported_operation"


class InvalidMessage(VaultError):
    """Тело сообщения (или собранная из него конфигурация) не проходит валидацию модели."""

    code = "invalid_message"


class ShareTokenNotBound(VaultError):
    code = "share_token_not_bound"

    def __init__(self, message: str = "Share token address is not bound yet"):
        super().__init__(message)


class InvalidHookMessage(VaultError):
    code = "invalid_hook_message"


class NotInitialized(VaultError):
    """Вызов до instantiate: состояние vault отсутствует."""

    code = "not_initialized"


class MathError(VaultError):
    """Переполнение / деление на ноль / отрицательный остаток в денежной арифметике."""

    code = "math_error"


# =============================================================================
# AUTHORIZATION
# =============================================================================


class Unauthorized(VaultError):
    kind = ErrorKind.AUTHORIZATION
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class OwnershipError(Unauthorized):
    code = "ownership_error"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Update ownership failed with {reason}")


# =============================================================================
# ASYNC
# =============================================================================


class SubMsgFailure(VaultError):
    kind = ErrorKind.ASYNC
    code = "submsg_failure"

    def __init__(self, err: str):
        self.err = err
        super().__init__(f"Failure response from submsg: {err}")


class UnrecognisedReply(VaultError):
    kind = ErrorKind.ASYNC
    code = "unrecognised_reply"

    def __init__(self, reply_id: int):
        self.reply_id = reply_id
        super().__init__(f"Unrecognised reply id: {reply_id}")


class ReplyParseError(VaultError):
    kind = ErrorKind.ASYNC
    code = "reply_parse_failure"

    def __init__(self, reply_id: int, err: str):
        self.reply_id = reply_id
        self.err = err
        super().__init__(f"Invalid reply from sub-message {reply_id}, {err}")


class ExternalQueryError(VaultError):
    """Сбой запроса к внешнему коллаборатору (bank, share token, venue, oracle)."""

    kind = ErrorKind.ASYNC
    code = "external_query_failure"
