"""Order filters: the unit that binds a chain and custom schema to a topic."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Mapping

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from referencing.exceptions import Unresolvable

from . import metrics
from .composer import compose
from .errors import OrderFilterError, SchemaCompileError, ValidationEngineError
from .order import SignedOrder
from .schemas import DEFAULT_CUSTOM_ORDER_SCHEMA
from .topic import decode_topic, encode_topic
from .validation import ValidationResult

__all__ = ["Filter", "new", "new_from_topic"]

logger = logging.getLogger(__name__)


def _load_json(document: str | bytes, what: str) -> Any:
    try:
        return json.loads(document)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValidationEngineError(f"could not parse {what} JSON: {exc}") from exc


def _decode_schema_bytes(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SchemaCompileError(
            f"custom order schema is not UTF-8: {exc}", cause=exc
        ) from exc


class Filter:
    """Schema filter for orders and messages on one chain.

    A filter is built from a chain ID and the text of a custom order schema
    and compiles two validators from them: one for bare signed orders and
    one for gossip messages of the form ``{"MessageType": ..., "Order":
    ...}``. Both are derived from the constructor arguments alone.

    Filters are immutable apart from the memoized :attr:`topic`. Validation
    only checks document structure; signatures and on-chain state are the
    caller's concern.
    """

    def __init__(
        self,
        chain_id: int,
        custom_order_schema: str | bytes = DEFAULT_CUSTOM_ORDER_SCHEMA,
        *,
        contract_addresses: Mapping[int, str] | None = None,
    ) -> None:
        try:
            if isinstance(custom_order_schema, bytes):
                custom_order_schema = _decode_schema_bytes(custom_order_schema)
            composed = compose(
                chain_id, custom_order_schema, contract_addresses=contract_addresses
            )
        except OrderFilterError as exc:
            metrics.record_construction("error")
            logger.warning("Could not build order filter for chain ID %s: %s", chain_id, exc)
            raise
        metrics.record_construction("ok")
        self._chain_id = int(chain_id)
        self._raw_custom_order_schema = custom_order_schema
        self._order_validator = composed.order_validator
        self._message_validator = composed.message_validator
        self._topic: str | None = None
        self._topic_lock = threading.Lock()

    @classmethod
    def from_topic(
        cls, topic: str, *, contract_addresses: Mapping[int, str] | None = None
    ) -> "Filter":
        """Rebuild the filter a peer announced with ``topic``."""

        chain_id, custom_order_schema = decode_topic(topic)
        return cls(chain_id, custom_order_schema, contract_addresses=contract_addresses)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def raw_custom_order_schema(self) -> str:
        return self._raw_custom_order_schema

    @property
    def order_validator(self) -> Draft7Validator:
        return self._order_validator

    @property
    def message_validator(self) -> Draft7Validator:
        return self._message_validator

    @property
    def topic(self) -> str:
        """The pubsub topic for this filter, computed once on first access."""

        if self._topic is None:
            with self._topic_lock:
                if self._topic is None:
                    self._topic = encode_topic(
                        self._chain_id, self._raw_custom_order_schema
                    )
        return self._topic

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def match_message_json(self, message_json: str | bytes) -> bool:
        """Return whether ``message_json`` is a schema-valid mesh message."""

        document = _load_json(message_json, "message")
        result = self._validate(self._message_validator, document, "message")
        return result.valid

    def validate_order_json(self, order_json: str | bytes) -> ValidationResult:
        """Validate the raw JSON of a signed order."""

        document = _load_json(order_json, "order")
        return self._validate(self._order_validator, document, "order")

    def validate_order(self, order: SignedOrder | Mapping[str, Any]) -> ValidationResult:
        """Validate an already-decoded signed order.

        ``order`` is either a :class:`~orderfilter.order.SignedOrder` or a
        mapping in the order's JSON form.
        """

        if isinstance(order, SignedOrder):
            document: Any = order.to_json_dict()
        else:
            document = dict(order)
        return self._validate(self._order_validator, document, "order")

    def _validate(
        self, validator: Draft7Validator, document: Any, kind: str
    ) -> ValidationResult:
        try:
            result = ValidationResult.from_errors(validator.iter_errors(document))
        except (Unresolvable, SchemaError, RecursionError) as exc:
            metrics.record_validation(kind, "error")
            logger.error("Schema engine failed to evaluate %s: %s", kind, exc)
            raise ValidationEngineError(f"could not evaluate {kind}: {exc}") from exc
        metrics.record_validation(kind, "valid" if result.valid else "invalid")
        if not result.valid:
            logger.debug(
                "%s failed validation on chain ID %s: %s", kind, self._chain_id, result.fields
            )
        return result

    def __repr__(self) -> str:
        return (
            f"Filter(chain_id={self._chain_id}, "
            f"custom_order_schema={self._raw_custom_order_schema!r})"
        )


def new(
    chain_id: int,
    custom_order_schema: str | bytes = DEFAULT_CUSTOM_ORDER_SCHEMA,
    *,
    contract_addresses: Mapping[int, str] | None = None,
) -> Filter:
    """Return a :class:`Filter` for ``chain_id`` and ``custom_order_schema``."""

    return Filter(chain_id, custom_order_schema, contract_addresses=contract_addresses)


def new_from_topic(
    topic: str, *, contract_addresses: Mapping[int, str] | None = None
) -> Filter:
    """Return the :class:`Filter` encoded by ``topic``."""

    return Filter.from_topic(topic, contract_addresses=contract_addresses)
