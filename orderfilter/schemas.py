"""Built-in JSON Schema fragments for 0x orders and mesh messages.

Every fragment carries an ``$id`` so later fragments can ``$ref`` it by name.
``rootOrder`` layers the caller's ``/customOrder`` schema on top of the
protocol-mandated ``/signedOrder`` shape, and ``rootMessage`` wraps a
``rootOrder`` in a gossip envelope. ``/customOrder`` and ``/exchangeAddress``
are supplied per filter by :mod:`orderfilter.composer`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

__all__ = [
    "ADDRESS_SCHEMA",
    "WHOLE_NUMBER_SCHEMA",
    "HEX_SCHEMA",
    "ORDER_SCHEMA",
    "SIGNED_ORDER_SCHEMA",
    "ROOT_ORDER_SCHEMA",
    "ROOT_MESSAGE_SCHEMA",
    "BUILT_IN_SCHEMAS",
    "ORDER_FIELDS",
    "ADDRESS_ID",
    "WHOLE_NUMBER_ID",
    "HEX_ID",
    "ORDER_ID",
    "SIGNED_ORDER_ID",
    "ROOT_ORDER_ID",
    "ROOT_MESSAGE_ID",
    "CUSTOM_ORDER_ID",
    "EXCHANGE_ADDRESS_ID",
    "DEFAULT_CUSTOM_ORDER_SCHEMA",
    "thaw",
]

ADDRESS_ID = "/address"
WHOLE_NUMBER_ID = "/wholeNumber"
HEX_ID = "/hex"
ORDER_ID = "/order"
SIGNED_ORDER_ID = "/signedOrder"
ROOT_ORDER_ID = "/rootOrder"
ROOT_MESSAGE_ID = "/rootMessage"
CUSTOM_ORDER_ID = "/customOrder"
EXCHANGE_ADDRESS_ID = "/exchangeAddress"

# Matches anything; used when the caller adds no restrictions of its own.
DEFAULT_CUSTOM_ORDER_SCHEMA = "{}"


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(inner) for key, inner in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Return a plain ``dict``/``list`` copy of a frozen schema fragment."""

    if isinstance(value, Mapping):
        return {key: thaw(inner) for key, inner in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


ADDRESS_SCHEMA = _freeze(
    {"$id": ADDRESS_ID, "type": "string", "pattern": "^0x[0-9a-fA-F]{40}\\Z"}
)

WHOLE_NUMBER_SCHEMA = _freeze(
    {
        "$id": WHOLE_NUMBER_ID,
        "anyOf": [
            {"type": "string", "pattern": "^[0-9]+\\Z"},
            {"type": "integer"},
        ],
    }
)

HEX_SCHEMA = _freeze(
    {"$id": HEX_ID, "type": "string", "pattern": "^0x(([0-9a-fA-F][0-9a-fA-F])+)?\\Z"}
)

# JSON field name -> fragment the field must satisfy.
ORDER_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "makerAddress": ADDRESS_ID,
        "takerAddress": ADDRESS_ID,
        "makerFee": WHOLE_NUMBER_ID,
        "takerFee": WHOLE_NUMBER_ID,
        "senderAddress": ADDRESS_ID,
        "makerAssetAmount": WHOLE_NUMBER_ID,
        "takerAssetAmount": WHOLE_NUMBER_ID,
        "makerAssetData": HEX_ID,
        "takerAssetData": HEX_ID,
        "salt": WHOLE_NUMBER_ID,
        "exchangeAddress": EXCHANGE_ADDRESS_ID,
        "feeRecipientAddress": ADDRESS_ID,
        "expirationTimeSeconds": WHOLE_NUMBER_ID,
    }
)

ORDER_SCHEMA = _freeze(
    {
        "$id": ORDER_ID,
        "type": "object",
        "properties": {name: {"$ref": ref} for name, ref in ORDER_FIELDS.items()},
        "required": list(ORDER_FIELDS),
    }
)

SIGNED_ORDER_SCHEMA = _freeze(
    {
        "$id": SIGNED_ORDER_ID,
        "allOf": [
            {"$ref": ORDER_ID},
            {
                "properties": {"signature": {"$ref": HEX_ID}},
                "required": ["signature"],
            },
        ],
    }
)

ROOT_ORDER_SCHEMA = _freeze(
    {
        "$id": ROOT_ORDER_ID,
        "allOf": [{"$ref": CUSTOM_ORDER_ID}, {"$ref": SIGNED_ORDER_ID}],
    }
)

# MessageType accepts any string.
ROOT_MESSAGE_SCHEMA = _freeze(
    {
        "$id": ROOT_MESSAGE_ID,
        "type": "object",
        "properties": {
            "MessageType": {"type": "string"},
            "Order": {"$ref": ROOT_ORDER_ID},
        },
        "required": ["MessageType", "Order"],
    }
)

BUILT_IN_SCHEMAS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        ADDRESS_ID: ADDRESS_SCHEMA,
        WHOLE_NUMBER_ID: WHOLE_NUMBER_SCHEMA,
        HEX_ID: HEX_SCHEMA,
        ORDER_ID: ORDER_SCHEMA,
        SIGNED_ORDER_ID: SIGNED_ORDER_SCHEMA,
    }
)
