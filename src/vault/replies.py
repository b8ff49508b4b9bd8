"""Reply Dispatcher — асинхронные подтверждения sub-messages.

Correlation ids:
- instantiate_token_reply_id (1): создание share token → привязка адреса
- order_reply_id (2): подтверждение ордера → атрибуты, без изменения состояния

Payload reply — UTF-8 JSON, проверяется JSON Schema контрактом
(src/core/contracts/schema). Любая ошибка декодирования → ReplyParseError.
"""

import json
import logging
from typing import Any, Dict

from jsonschema import ValidationError

from src.core.contracts.validators import (
    ContractValidator,
    DerivativeOrderReplyValidator,
    InstantiateTokenReplyValidator,
    SpotOrderReplyValidator,
)
from src.core.domain.asset import validate_address
from src.core.domain.host import Env, Reply, Response
from src.core.domain.vault_config import VenueKind
from src.core.errors import (
    MathError,
    ReplyParseError,
    SubMsgFailure,
    Unauthorized,
    UnrecognisedReply,
)
from src.core.math.fixed_point import fp, fp_div, fp_from_str, scaled, to_uint
from src.vault.config import VaultSettings
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


class ReplyDispatcher:
    def __init__(self, state: VaultState, settings: VaultSettings):
        self.state = state
        self.settings = settings
        self._token_validator = InstantiateTokenReplyValidator()
        self._derivative_validator = DerivativeOrderReplyValidator()
        self._spot_validator = SpotOrderReplyValidator()

    def dispatch(self, env: Env, reply: Reply) -> Response:
        """
        Маршрутизация reply по correlation id.

        Raises:
            UnrecognisedReply: неизвестный id
        """
        if reply.id == self.settings.instantiate_token_reply_id:
            return self.handle_instantiate_token(reply)
        if reply.id == self.settings.order_reply_id:
            return self.handle_order(reply)
        raise UnrecognisedReply(reply.id)

    # -------------------------------------------------------------------------
    # Share token creation
    # -------------------------------------------------------------------------

    def handle_instantiate_token(self, reply: Reply) -> Response:
        """
        Привязка адреса share token (ровно один раз).

        Raises:
            Unauthorized: адрес уже привязан (повторный reply)
            SubMsgFailure: sub-call завершился ошибкой
            ReplyParseError: payload отсутствует или не соответствует контракту
            InvalidAddress: адрес в payload некорректен
        """
        config = self.state.load_config()
        if config.is_share_token_bound:
            logger.warning("duplicate share token reply ignored: bound=%s", config.share_token)
            raise Unauthorized()

        payload = self._decode(reply, self._token_validator)
        address = validate_address(payload["contract_address"])
        self.state.bind_share_token(address)

        logger.info("share token bound: %s", address)
        return Response().add_attribute("liquidity_token_addr", address)

    # -------------------------------------------------------------------------
    # Order confirmation
    # -------------------------------------------------------------------------

    def handle_order(self, reply: Reply) -> Response:
        config = self.state.load_config()
        if config.kind == VenueKind.PERPETUAL:
            return self._derivative_order(reply)
        return self._spot_order(reply)

    def _derivative_order(self, reply: Reply) -> Response:
        """
        Perpetual: order_hash + trade results (quantity, price, fee),
        масштабированные на 10^18, выводятся усечёнными целыми.

        Fee из reply в FeeLedger не зачисляются.
        """
        payload = self._decode(reply, self._derivative_validator, require_results=True)
        results = payload["results"]
        precision = scaled(fp(1), self.settings.venue_precision_decimals)

        try:
            values = {
                key: to_uint(fp_div(fp_from_str(results[key]), precision))
                for key in ("quantity", "price", "fee")
            }
        except MathError as e:
            raise ReplyParseError(reply.id, e.message) from e

        logger.info(
            "order confirmed: hash=%s quantity=%s price=%s fee=%s",
            payload["order_hash"],
            values["quantity"],
            values["price"],
            values["fee"],
        )
        return Response().add_attributes(
            [
                ("action", "swap"),
                ("order_hash", payload["order_hash"]),
                ("quantity", values["quantity"]),
                ("price", values["price"]),
                ("fee", values["fee"]),
            ]
        )

    def _spot_order(self, reply: Reply) -> Response:
        """Spot: только hash первого созданного ордера."""
        payload = self._decode(reply, self._spot_validator)
        order_hash = payload["spot_order_hashes"][0]
        logger.info("order confirmed: hash=%s", order_hash)
        return Response().add_attribute("order_hash", order_hash)

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    @staticmethod
    def _decode(
        reply: Reply, validator: ContractValidator, require_results: bool = False
    ) -> Dict[str, Any]:
        if not reply.result.is_ok:
            raise SubMsgFailure(reply.result.error)
        if reply.result.data is None:
            raise ReplyParseError(reply.id, "Missing reply data")

        try:
            payload = json.loads(reply.result.data)
        except ValueError as e:
            raise ReplyParseError(reply.id, str(e)) from e

        if require_results and isinstance(payload, dict) and payload.get("results") is None:
            raise ReplyParseError(reply.id, "No trade data in order response")

        try:
            validator.validate(payload)
        except ValidationError as e:
            raise ReplyParseError(reply.id, e.message) from e
        return payload
