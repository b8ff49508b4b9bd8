"""
Reply payload contracts.

Payload асинхронных подтверждений (reply data) приходит от внешних
контрактов как JSON. Перед разбором он сверяется с JSON Schema из
каталога schema/, поставляемого вместе с пакетом:

- instantiate_token_reply: адрес созданного share token (correlation id 1)
- derivative_order_reply: trade results perpetual ордера (correlation id 2)
- spot_order_reply: hashes spot batch ордера (correlation id 2)
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft202012Validator, SchemaError

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Читает schema/<name>.json и проверяет её по мета-схеме Draft 2020-12.

    Прочитанные схемы кэшируются в экземпляре.
    """

    def __init__(self, schema_dir: Optional[Path] = None):
        directory = schema_dir if schema_dir is not None else SCHEMA_DIR
        if not directory.is_dir():
            raise RuntimeError(f"Reply schema directory is missing: {directory}")
        self._schema_dir = directory
        self._cache: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Вернуть схему по имени файла без расширения.

        Raises:
            FileNotFoundError: нет файла <schema_name>.json
            ValueError: документ не является корректной JSON Schema
        """
        cached = self._cache.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"No reply schema at {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            raise ValueError(f"Invalid JSON Schema {path.name}: {e.message}") from e

        self._cache[schema_name] = schema
        return schema


_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Проверка payload по одной схеме; подклассы задают SCHEMA_NAME."""

    SCHEMA_NAME: str = ""

    def __init__(self, loader: Optional[SchemaLoader] = None):
        self.schema = (loader or _LOADER).load_schema(self.SCHEMA_NAME)
        self._checker = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """Raises jsonschema.ValidationError на первом нарушении."""
        self._checker.validate(data)

    def is_valid(self, data: Any) -> bool:
        return self._checker.is_valid(data)


class InstantiateTokenReplyValidator(ContractValidator):
    """{"contract_address": "<bech32>"} от создания share token."""

    SCHEMA_NAME = "instantiate_token_reply"


class DerivativeOrderReplyValidator(ContractValidator):
    """
    Ответ на создание perpetual ордера.

    quantity, price и fee в results: целые строки в масштабе 10^18.
    """

    SCHEMA_NAME = "derivative_order_reply"


class SpotOrderReplyValidator(ContractValidator):
    SCHEMA_NAME = "spot_order_reply"


# =============================================================================
# SHORTCUTS
# =============================================================================


def validate_instantiate_token_reply(data: Any) -> None:
    InstantiateTokenReplyValidator().validate(data)


def validate_derivative_order_reply(data: Any) -> None:
    DerivativeOrderReplyValidator().validate(data)


def validate_spot_order_reply(data: Any) -> None:
    SpotOrderReplyValidator().validate(data)
