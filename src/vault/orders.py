"""Order Controller — отправка и отмена ордеров от имени пула.

Owner-gated. Ордер создаётся от trading identity vault (subaccount id)
как sub-message с reply-on-success и correlation id подтверждения ордера.
Локально ордера не хранятся: venue — источник истины.

Предусловия отправки (по порядку):
1. вид swap соответствует venue vault
2. вызывающий — owner
3. к вызову не приложены средства
4. price × quantity ≤ tradable balance исходного актива
   (quote для buy / long, base для sell на SPOT; всегда quote на PERPETUAL)
"""

import logging
from decimal import Decimal

from src.adapters.gateways import Gateways
from src.core.domain.exchange import OrderType
from src.core.domain.host import Env, MessageInfo, Response, SubMsg
from src.core.domain.messages import CancelOrder, SwapPerpetual, SwapSpot
from src.core.domain.vault_config import VaultConfig, VenueKind
from src.core.errors import FundsNotAllowed, InsufficientBalance, UnsupportedOperation
from src.core.math.fixed_point import fp, fp_display, fp_mul
from src.vault.config import VaultSettings
from src.vault.fee_ledger import tradable_balance
from src.vault.ownership import OwnershipStateMachine
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


class OrderController:
    def __init__(
        self,
        state: VaultState,
        gateways: Gateways,
        ownership: OwnershipStateMachine,
        settings: VaultSettings,
    ):
        self.state = state
        self.gateways = gateways
        self.ownership = ownership
        self.settings = settings

    def swap_spot(self, env: Env, info: MessageInfo, msg: SwapSpot) -> Response:
        """Spot ордер: buy расходует quote, sell расходует base."""
        config = self._require_venue(VenueKind.SPOT, "SwapSpot")
        price, quantity = fp(msg.price), fp(msg.quantity)
        source = config.quote.denom if msg.buying else config.base.denom
        self._check_preconditions(env, info, source, price, quantity)

        order_type = OrderType.BUY if msg.buying else OrderType.SELL
        order_msg = self.gateways.exchange.spot_order_msg(
            sender=env.contract_address,
            market_id=config.market_id,
            subaccount_id=config.subaccount_id,
            order_type=order_type,
            price=price,
            quantity=quantity,
        )
        return self._submit(order_msg, order_type, price, quantity)

    def swap_perpetual(self, env: Env, info: MessageInfo, msg: SwapPerpetual) -> Response:
        """Perpetual рыночный ордер с маржой: long = buy, short = sell."""
        config = self._require_venue(VenueKind.PERPETUAL, "SwapPerpetual")
        price, quantity = fp(msg.price), fp(msg.quantity)
        self._check_preconditions(env, info, config.quote.denom, price, quantity)

        order_type = OrderType.BUY if msg.long else OrderType.SELL
        order_msg = self.gateways.exchange.derivative_order_msg(
            sender=env.contract_address,
            market_id=config.market_id,
            subaccount_id=config.subaccount_id,
            order_type=order_type,
            price=price,
            quantity=quantity,
            margin=fp(msg.margin),
        )
        return self._submit(order_msg, order_type, price, quantity)

    def cancel(self, env: Env, info: MessageInfo, msg: CancelOrder) -> Response:
        """Отмена ордера по hash (fire-and-forget)."""
        config = self.state.load_config()
        self.ownership.assert_owner(info.sender)

        exchange = self.gateways.exchange
        if config.kind == VenueKind.SPOT:
            cancel_msg = exchange.cancel_spot_order_msg(
                env.contract_address, config.market_id, config.subaccount_id, msg.order_hash
            )
        else:
            cancel_msg = exchange.cancel_derivative_order_msg(
                env.contract_address,
                config.market_id,
                config.subaccount_id,
                msg.order_hash,
                self.settings.derivative_cancel_order_mask,
            )

        logger.info("cancel order %s on %s", msg.order_hash, config.market_id)
        return (
            Response()
            .add_message(cancel_msg)
            .add_attributes([("action", "cancel_order"), ("order_hash", msg.order_hash)])
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_venue(self, kind: VenueKind, operation: str) -> VaultConfig:
        config = self.state.load_config()
        if config.kind != kind:
            raise UnsupportedOperation(f"{operation} is not supported by a {config.kind.value} vault")
        return config

    def _check_preconditions(
        self,
        env: Env,
        info: MessageInfo,
        source_denom: str,
        price: Decimal,
        quantity: Decimal,
    ) -> None:
        self.ownership.assert_owner(info.sender)
        if info.funds:
            raise FundsNotAllowed()

        min_amount = fp_mul(price, quantity)
        balance = fp(
            tradable_balance(self.gateways.bank, self.state, env.contract_address, source_denom)
        )
        if balance < min_amount:
            raise InsufficientBalance(
                f"Swap: {fp_display(balance)} below min_amount: {fp_display(min_amount)}"
            )

    def _submit(self, order_msg, order_type: OrderType, price: Decimal, quantity: Decimal) -> Response:
        logger.info(
            "submit %s order: price=%s quantity=%s",
            order_type.value,
            fp_display(price),
            fp_display(quantity),
        )
        return (
            Response()
            .add_submessage(SubMsg.reply_on_success(order_msg, self.settings.order_reply_id))
            .add_attributes(
                [
                    ("action", "submit_order"),
                    ("order_type", order_type.value),
                    ("price", fp_display(price)),
                    ("quantity", fp_display(quantity)),
                ]
            )
        )
