"""
Ownership — модель владения vault

Двухшаговая передача владения:
owner → transfer_ownership(new_owner, expiry) → pending_owner → accept_ownership

Immutable Pydantic модели.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.core.domain.host import BlockInfo


class Expiration(BaseModel):
    """
    Срок действия pending передачи владения.

    Ровно одно из полей at_height / at_time задано, либо оба пусты (never).
    """

    at_height: Optional[int] = Field(None, ge=0)
    at_time: Optional[int] = Field(None, ge=0, description="Unix timestamp, секунды")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_single_bound(self) -> "Expiration":
        if self.at_height is not None and self.at_time is not None:
            raise ValueError("expiration must be either at_height or at_time")
        return self

    @classmethod
    def never(cls) -> "Expiration":
        return cls()

    def is_expired(self, block: BlockInfo) -> bool:
        if self.at_height is not None:
            return block.height >= self.at_height
        if self.at_time is not None:
            return block.time >= self.at_time
        return False


class Ownership(BaseModel):
    """Текущее состояние владения."""

    owner: Optional[str] = None
    pending_owner: Optional[str] = None
    pending_expiry: Optional[Expiration] = None

    model_config = {"frozen": True}
