"""Ownership State Machine — двухшаговая передача владения vault.

Состояния (Ownership):
- OWNED: owner задан, pending пусто
- PENDING: owner задан, pending_owner ожидает accept (опционально до expiry)
- RENOUNCED: owner пуст, все owner-gated операции недоступны

Переходы:
- transfer_ownership(new_owner, expiry): OWNED/PENDING → PENDING (только owner)
- accept_ownership: PENDING → OWNED(new owner) (только pending owner, до expiry)
- renounce_ownership: OWNED/PENDING → RENOUNCED (только owner)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.core.domain.asset import validate_address
from src.core.domain.host import BlockInfo
from src.core.domain.messages import (
    AcceptOwnership,
    OwnershipAction,
    RenounceOwnership,
    TransferOwnership,
)
from src.core.domain.ownership import Ownership
from src.core.errors import OwnershipError, Unauthorized
from src.vault.state import VaultState

logger = logging.getLogger(__name__)


# Причины отказа (текст попадает в "Update ownership failed with {reason}")
NOT_OWNER = "Caller is not the contract's current owner"
NO_OWNER = "Contract ownership has been renounced"
NOT_PENDING_OWNER = "Caller is not the contract's pending owner"
TRANSFER_NOT_FOUND = "There is not pending ownership transfer"
TRANSFER_EXPIRED = "The pending ownership transfer has expired"
INVALID_EXPIRY = "The expiry has already passed"


@dataclass(frozen=True)
class OwnershipTransition:
    """Результат перехода ownership."""

    previous: Ownership
    current: Ownership
    action: str


class OwnershipStateMachine:
    """Управление владением поверх VaultState."""

    def __init__(self, state: VaultState):
        self.state = state

    def initialize(self, owner: str) -> Ownership:
        ownership = Ownership(owner=validate_address(owner))
        self.state.save_ownership(ownership)
        return ownership

    def get(self) -> Ownership:
        return self.state.load_ownership()

    def is_owner(self, sender: str) -> bool:
        owner = self.get().owner
        return owner is not None and owner == sender

    def assert_owner(self, sender: str) -> None:
        """
        Raises:
            Unauthorized: если sender не текущий owner
        """
        if not self.is_owner(sender):
            raise Unauthorized()

    def update(self, block: BlockInfo, sender: str, action: OwnershipAction) -> OwnershipTransition:
        """Применение действия ownership.

        Args:
            block: текущий блок (для проверки expiry)
            sender: вызывающий адрес
            action: TransferOwnership / AcceptOwnership / RenounceOwnership

        Returns:
            OwnershipTransition (сохранённое новое состояние)

        Raises:
            OwnershipError: переход запрещён
        """
        previous = self.get()

        if isinstance(action, TransferOwnership):
            current = self._transfer(previous, block, sender, action)
            name = "transfer_ownership"
        elif isinstance(action, AcceptOwnership):
            current = self._accept(previous, block, sender)
            name = "accept_ownership"
        elif isinstance(action, RenounceOwnership):
            self._check_owner(previous, sender)
            current = Ownership()
            name = "renounce_ownership"
        else:
            raise OwnershipError(f"unknown action {type(action).__name__}")

        self.state.save_ownership(current)
        logger.info(
            "ownership %s: owner=%s pending_owner=%s",
            name,
            current.owner,
            current.pending_owner,
        )
        return OwnershipTransition(previous=previous, current=current, action=name)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _transfer(
        self,
        ownership: Ownership,
        block: BlockInfo,
        sender: str,
        action: TransferOwnership,
    ) -> Ownership:
        self._check_owner(ownership, sender)
        if action.expiry is not None and action.expiry.is_expired(block):
            raise OwnershipError(INVALID_EXPIRY)
        new_owner = validate_address(action.new_owner)
        return Ownership(
            owner=ownership.owner,
            pending_owner=new_owner,
            pending_expiry=action.expiry,
        )

    def _accept(self, ownership: Ownership, block: BlockInfo, sender: str) -> Ownership:
        if ownership.pending_owner is None:
            raise OwnershipError(TRANSFER_NOT_FOUND)
        if ownership.pending_owner != sender:
            raise OwnershipError(NOT_PENDING_OWNER)
        if ownership.pending_expiry is not None and ownership.pending_expiry.is_expired(block):
            raise OwnershipError(TRANSFER_EXPIRED)
        return Ownership(owner=sender)

    @staticmethod
    def _check_owner(ownership: Ownership, sender: str) -> None:
        if ownership.owner is None:
            raise OwnershipError(NO_OWNER)
        if ownership.owner != sender:
            raise OwnershipError(NOT_OWNER)


def describe(ownership: Ownership) -> dict[str, Optional[object]]:
    """Ответ query Ownership."""
    return {
        "owner": ownership.owner,
        "pending_owner": ownership.pending_owner,
        "pending_expiry": (
            ownership.pending_expiry.model_dump() if ownership.pending_expiry else None
        ),
    }
