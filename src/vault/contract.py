"""Vault — точки входа: instantiate / execute / reply / query.

Каждый state-changing вызов атомарен: storage снимается до вызова и
восстанавливается, если движок выбросил исключение. Ответ (Response)
содержит исходящие инструкции, которые host исполняет по порядку.

Пример:
    ledger = MemoryLedger()
    vault = Vault(ledger.gateways)
    vault.instantiate(env, MessageInfo(sender="addr0000"), InstantiateMsg(...))
    vault.reply(env, Reply(id=1, result=SubMsgResult.ok(b'{"contract_address": "..."}')))
    response = vault.execute(env, info, Deposit(assets=[...]))
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from src.adapters.gateways import Gateways
from src.core.domain.asset import format_lp_token_name
from src.core.domain.exchange import MarketStatus
from src.core.domain.host import Env, MessageInfo, Reply, Response, SubMsg
from src.core.domain.messages import (
    AddFee,
    CancelOrder,
    Deposit,
    ExecuteMsg,
    InstantiateMsg,
    OwnershipQuery,
    Prices,
    QueryMsg,
    Receive,
    SwapPerpetual,
    SwapSpot,
    Tokens,
    TokensForShares,
    TotalLiquidity,
    UpdateOwnership,
    UserLiquidity,
    WithdrawFee,
    describe_validation_error,
    parse_execute_msg,
    parse_query_msg,
)
from src.core.domain.vault_config import PoolAsset, VaultConfig, VenueKind
from src.core.errors import (
    InvalidMessage,
    MarketNotActive,
    MarketNotFound,
    UnsupportedOperation,
    VaultError,
)
from src.vault.config import DEFAULT_SETTINGS, VaultSettings
from src.vault.deposit import DepositEngine
from src.vault.fee_ledger import FeeLedger
from src.vault.oracle import PriceOracleAdapter
from src.vault.orders import OrderController
from src.vault.ownership import OwnershipStateMachine
from src.vault.queries import QueryService
from src.vault.replies import ReplyDispatcher
from src.vault.state import VaultState
from src.vault.withdrawal import WithdrawalEngine

logger = logging.getLogger(__name__)


class Vault:
    """Фасад vault: собирает движки поверх одного VaultState."""

    def __init__(
        self,
        gateways: Gateways,
        state: Optional[VaultState] = None,
        settings: VaultSettings = DEFAULT_SETTINGS,
    ):
        self.gateways = gateways
        self.state = state or VaultState()
        self.settings = settings

        self.ownership = OwnershipStateMachine(self.state)
        self.oracle = PriceOracleAdapter(gateways.price_feed, settings)
        self.fees = FeeLedger(self.state, self.ownership)
        self.deposits = DepositEngine(self.state, gateways, self.oracle, settings)
        self.withdrawals = WithdrawalEngine(self.state, gateways)
        self.orders = OrderController(self.state, gateways, self.ownership, settings)
        self.replies = ReplyDispatcher(self.state, settings)
        self.queries = QueryService(self.state, gateways, self.oracle, settings)

    # =========================================================================
    # INSTANTIATE
    # =========================================================================

    def instantiate(self, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
        return self._invoke("instantiate", lambda: self._instantiate(env, msg))

    def _instantiate(self, env: Env, msg: InstantiateMsg) -> Response:
        if self.state.is_initialized:
            raise UnsupportedOperation("vault is already instantiated")

        config = self._build_config(env, msg)
        self.ownership.initialize(msg.owner)
        self.state.save_config(config)
        self.state.init_fees(config)

        token_msg = self.gateways.share_token.instantiate_msg(
            code_id=msg.token_code_id,
            name=format_lp_token_name(*config.denoms),
            symbol=self.settings.lp_token_symbol,
            decimals=self.settings.share_decimals,
            minter=env.contract_address,
            label=self.settings.lp_token_label,
        )
        logger.info(
            "vault instantiated: kind=%s market=%s assets=%s owner=%s",
            config.kind.value,
            config.market_id,
            config.denoms,
            msg.owner,
        )
        return (
            Response()
            .add_submessage(
                SubMsg.reply_on_success(token_msg, self.settings.instantiate_token_reply_id)
            )
            .add_attribute("method", "instantiate")
        )

    def _build_config(self, env: Env, msg: InstantiateMsg) -> VaultConfig:
        """Конфигурация по рынку venue (рынок должен существовать и быть активным)."""
        exchange = self.gateways.exchange
        if msg.kind == VenueKind.SPOT:
            market = exchange.query_spot_market(msg.market_id)
        else:
            market = exchange.query_derivative_market(msg.market_id)
        if market is None:
            raise MarketNotFound(f"Market with id: {msg.market_id} not found")
        if market.status != MarketStatus.ACTIVE:
            raise MarketNotActive(f"Market with id: {msg.market_id} not active")

        subaccount_id = exchange.default_subaccount_id(env.contract_address)
        try:
            quote = PoolAsset(
                denom=market.quote_denom,
                decimals=msg.quote_decimal,
                price_id=msg.quote_price_id if msg.kind == VenueKind.SPOT else None,
            )
            base = None
            if msg.kind == VenueKind.SPOT:
                base = PoolAsset(
                    denom=market.base_denom, decimals=msg.base_decimal, price_id=msg.base_price_id
                )
            return VaultConfig(
                kind=msg.kind,
                market_id=msg.market_id,
                base=base,
                quote=quote,
                hardcap=msg.hardcap,
                subaccount_id=subaccount_id,
            )
        except ValidationError as e:
            raise InvalidMessage(
                f"Invalid vault config for market {msg.market_id}: {describe_validation_error(e)}"
            ) from e

    # =========================================================================
    # EXECUTE
    # =========================================================================

    def execute(
        self, env: Env, info: MessageInfo, msg: Union[ExecuteMsg, Dict[str, Any]]
    ) -> Response:
        """
        Execute сообщение (типизированное или во внешней JSON форме).

        Raises:
            VaultError: любой отказ; состояние не изменяется
        """
        if isinstance(msg, dict):
            name = "|".join(str(tag) for tag in msg) or "execute"
        else:
            name = type(msg).__name__
        return self._invoke(name, lambda: self._execute(env, info, msg), sender=info.sender)

    def _execute(
        self, env: Env, info: MessageInfo, msg: Union[ExecuteMsg, Dict[str, Any]]
    ) -> Response:
        if isinstance(msg, dict):
            msg = parse_execute_msg(msg)
        if isinstance(msg, UpdateOwnership):
            self.ownership.update(env.block, info.sender, msg.action)
            return Response().add_attribute("action", "update_ownership")
        if isinstance(msg, Receive):
            return self.withdrawals.receive(env, info, msg.msg)
        if isinstance(msg, Deposit):
            return self.deposits.deposit(env, info, msg)
        if isinstance(msg, SwapSpot):
            return self.orders.swap_spot(env, info, msg)
        if isinstance(msg, SwapPerpetual):
            return self.orders.swap_perpetual(env, info, msg)
        if isinstance(msg, CancelOrder):
            return self.orders.cancel(env, info, msg)
        if isinstance(msg, AddFee):
            return self.fees.add(info.sender, msg.fees)
        if isinstance(msg, WithdrawFee):
            return self.fees.withdraw(info.sender, msg.fees)
        raise UnsupportedOperation(f"unknown execute message {type(msg).__name__}")

    # =========================================================================
    # REPLY
    # =========================================================================

    def reply(self, env: Env, reply: Reply) -> Response:
        return self._invoke(f"reply[{reply.id}]", lambda: self.replies.dispatch(env, reply))

    # =========================================================================
    # QUERY
    # =========================================================================

    def query(self, env: Env, msg: Union[QueryMsg, Dict[str, Any]]) -> Any:
        """Read-only запрос (состояние не изменяется)."""
        try:
            return self._query(env, msg)
        except VaultError as e:
            logger.warning("query rejected (%s/%s): %s", e.kind.value, e.code, e.message)
            raise

    def _query(self, env: Env, msg: Union[QueryMsg, Dict[str, Any]]) -> Any:
        if isinstance(msg, dict):
            msg = parse_query_msg(msg)

        if isinstance(msg, OwnershipQuery):
            return self.queries.ownership()
        if isinstance(msg, TokensForShares):
            return self.queries.tokens_for_shares(env, msg.share)
        if isinstance(msg, TotalLiquidity):
            return self.queries.total_liquidity(env)
        if isinstance(msg, UserLiquidity):
            return self.queries.user_liquidity(env, msg.user)
        if isinstance(msg, Prices):
            return self.queries.prices(env)
        if isinstance(msg, Tokens):
            return self.queries.tokens()
        raise UnsupportedOperation(f"unknown query message {type(msg).__name__}")

    # =========================================================================
    # ATOMICITY
    # =========================================================================

    def _invoke(
        self, name: str, handler: Callable[[], Response], sender: Optional[str] = None
    ) -> Response:
        try:
            with self.state.transaction():
                return handler()
        except VaultError as e:
            logger.warning(
                "%s rejected (%s/%s) sender=%s: %s",
                name,
                e.kind.value,
                e.code,
                sender,
                e.message,
            )
            raise
