"""Price Oracle Adapter — цены активов dual-asset vault.

Цены запрашиваются на каждый вызов (без кэша) и отклоняются,
если семпл старше окна актуальности (60s по умолчанию).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.adapters.gateways import PriceFeedGateway
from src.core.domain.host import BlockInfo
from src.core.domain.vault_config import VaultConfig, VenueKind
from src.core.errors import ExternalQueryError, StalePrice, UnsupportedOperation
from src.core.math.fixed_point import fp
from src.vault.config import VaultSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetPrices:
    """Цены base / quote в fixed point."""

    base: Decimal
    quote: Decimal

    def as_list(self) -> list[Decimal]:
        return [self.base, self.quote]


class PriceOracleAdapter:
    def __init__(self, price_feed: PriceFeedGateway, settings: VaultSettings):
        self.price_feed = price_feed
        self.settings = settings

    def get_prices(self, config: VaultConfig, block: BlockInfo) -> AssetPrices:
        """
        Цены обоих активов SPOT vault.

        Args:
            config: конфигурация vault (price feed ids)
            block: текущий блок (время для проверки актуальности)

        Returns:
            AssetPrices

        Raises:
            UnsupportedOperation: vault не SPOT
            ExternalQueryError: price state отсутствует
            StalePrice: timestamp семпла < now − price_valid_duration_sec
        """
        if config.kind != VenueKind.SPOT or config.base is None:
            raise UnsupportedOperation("Prices are only available for spot vaults")

        base_state = self.price_feed.query_pyth_price(config.base.price_id)
        if base_state is None:
            raise ExternalQueryError("Failed to get base asset price")
        quote_state = self.price_feed.query_pyth_price(config.quote.price_id)
        if quote_state is None:
            raise ExternalQueryError("Failed to get quote asset price")

        oldest_allowed = block.time - self.settings.price_valid_duration_sec
        if base_state.timestamp < oldest_allowed or quote_state.timestamp < oldest_allowed:
            logger.warning(
                "stale price: base_ts=%s quote_ts=%s now=%s",
                base_state.timestamp,
                quote_state.timestamp,
                block.time,
            )
            raise StalePrice()

        return AssetPrices(base=fp(base_state.price), quote=fp(quote_state.price))
