"""Withdrawal Engine — погашение share в обмен на долю активов.

Вызывается только share token'ом ("tokens received with payload" с hook
{"withdraw": {}}): share уже переведены на vault, vault их сжигает.

    refund_i = tradable_i × burned_share // supply

Накопленные fee в возврат не входят.
"""

import logging

from src.adapters.gateways import Gateways
from src.core.domain.asset import Asset, format_assets
from src.core.domain.host import BankSend, Env, MessageInfo, Response
from src.core.domain.messages import Cw20ReceiveMsg
from src.core.errors import InvalidZeroAmount, Unauthorized
from src.core.math.fixed_point import multiply_ratio
from src.vault.fee_ledger import tradable_balances
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


class WithdrawalEngine:
    def __init__(self, state: VaultState, gateways: Gateways):
        self.state = state
        self.gateways = gateways

    def receive(self, env: Env, info: MessageInfo, msg: Cw20ReceiveMsg) -> Response:
        """
        Обработка уведомления share token.

        Args:
            env: окружение вызова
            info: info.sender — адрес share token
            msg: msg.sender — владелец share, msg.amount — сжигаемые share

        Returns:
            Response: burn, затем перевод по каждому активу с ненулевым возвратом

        Raises:
            InvalidHookMessage: payload не является withdraw hook
            Unauthorized: вызывающий не привязанный share token
            InvalidZeroAmount: нулевое количество share
            MathError: supply равен нулю
        """
        msg.is_withdraw_hook()
        return self.withdraw(env, info, msg.sender, msg.amount)

    def withdraw(self, env: Env, info: MessageInfo, owner: str, amount: int) -> Response:
        config = self.state.load_config()
        if not config.is_share_token_bound or info.sender != config.share_token:
            raise Unauthorized()
        if amount == 0:
            raise InvalidZeroAmount("Can't withdraw zero amount")

        token = config.share_token
        total_share = self.gateways.share_token.query_supply(token)
        balances = tradable_balances(self.gateways.bank, self.state, env.contract_address)
        refunds = [
            Asset.of(denom, multiply_ratio(balance, amount, total_share))
            for denom, balance in balances.items()
        ]

        response = Response().add_message(self.gateways.share_token.burn_msg(token, amount))
        for refund in refunds:
            if refund.amount:
                response.add_message(BankSend(to_address=owner, amount=[refund.as_coin()]))

        logger.info(
            "withdraw accepted: owner=%s share=%s supply=%s refunds=%s",
            owner,
            amount,
            total_share,
            format_assets(refunds),
        )
        return response.add_attributes(
            [
                ("action", "withdraw"),
                ("sender", owner),
                ("withdrawn_share", amount),
                ("refund_assets", format_assets(refunds)),
            ]
        )
