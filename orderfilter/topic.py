"""Encode and decode 0x mesh pubsub topics.

A topic names the chain and the custom order schema a node validates with::

    /0x-orders/version/3/chain/{chain_id}/schema/{base64url(canonical schema)}

The schema is canonicalized before it is embedded, so schemas that differ
only in key order or whitespace share a topic. Any topic version other than
:data:`TOPIC_VERSION` is rejected outright.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re

from .canonical import canonicalize
from .errors import Base64DecodeError, TopicFormatError, WrongVersionError

__all__ = [
    "TOPIC_VERSION",
    "TOPIC_PREFIX",
    "encode_topic",
    "decode_topic",
]

logger = logging.getLogger(__name__)

TOPIC_VERSION = 3
TOPIC_PREFIX = "/0x-orders"

_FULL_TOPIC_FORMAT = TOPIC_PREFIX + "/version/{version}/chain/{chain_id}/schema/{schema}"
_VERSION_RE = re.compile(r"^/0x-orders/version/([+-]?[0-9]+)(.*)\Z", re.DOTALL)
_CHAIN_AND_SCHEMA_RE = re.compile(r"^/chain/([+-]?[0-9]+)/schema/(\S+)\Z")
_BASE64URL_RE = re.compile(r"^[A-Za-z0-9_-]*={0,2}\Z")


def encode_topic(chain_id: int, custom_order_schema: str | bytes) -> str:
    """Return the topic for ``chain_id`` and ``custom_order_schema``.

    Raises :class:`~orderfilter.errors.SchemaCompileError` if the schema is
    not valid JSON.
    """

    canonical = canonicalize(custom_order_schema)
    encoded = base64.urlsafe_b64encode(canonical).decode("ascii")
    return _FULL_TOPIC_FORMAT.format(
        version=TOPIC_VERSION, chain_id=int(chain_id), schema=encoded
    )


def _decode_schema(segment: str) -> str:
    if not _BASE64URL_RE.match(segment) or len(segment) % 4:
        raise Base64DecodeError(segment)
    try:
        raw = base64.urlsafe_b64decode(segment)
    except (binascii.Error, ValueError) as exc:
        raise Base64DecodeError(segment) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise Base64DecodeError(segment) from exc


def decode_topic(topic: str) -> tuple[int, str]:
    """Split ``topic`` into its chain ID and custom order schema text.

    The version is checked before the chain and schema segments are parsed,
    so a topic from another protocol version always fails with
    :class:`~orderfilter.errors.WrongVersionError`.
    """

    match = _VERSION_RE.match(topic)
    if match is None:
        raise TopicFormatError(topic, "could not parse topic version for topic")
    version = int(match.group(1))
    if version != TOPIC_VERSION:
        logger.debug("Rejecting topic with version %s: %s", version, topic)
        raise WrongVersionError(expected=TOPIC_VERSION, actual=version)

    rest = _CHAIN_AND_SCHEMA_RE.match(match.group(2))
    if rest is None:
        raise TopicFormatError(topic, "could not parse chain ID and schema from topic")
    chain_id = int(rest.group(1))
    return chain_id, _decode_schema(rest.group(2))
