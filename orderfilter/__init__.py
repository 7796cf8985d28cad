"""Schema filters and pubsub topics for 0x mesh order relay."""

from .errors import (
    Base64DecodeError,
    NetworkLookupError,
    OrderFilterError,
    SchemaCompileError,
    TopicFormatError,
    ValidationEngineError,
    WrongVersionError,
)
from .schemas import DEFAULT_CUSTOM_ORDER_SCHEMA
from .canonical import canonicalize
from .topic import TOPIC_VERSION, decode_topic, encode_topic
from .order import SignedOrder
from .validation import ValidationIssue, ValidationResult
from .filter import Filter, new, new_from_topic
from .cache import FilterCache, filter_from_topic
from .config import OrderFilterConfig, load_config

__all__ = [
    "Filter",
    "new",
    "new_from_topic",
    "FilterCache",
    "filter_from_topic",
    "SignedOrder",
    "ValidationIssue",
    "ValidationResult",
    "TOPIC_VERSION",
    "encode_topic",
    "decode_topic",
    "canonicalize",
    "DEFAULT_CUSTOM_ORDER_SCHEMA",
    "OrderFilterConfig",
    "load_config",
    "OrderFilterError",
    "NetworkLookupError",
    "SchemaCompileError",
    "TopicFormatError",
    "WrongVersionError",
    "Base64DecodeError",
    "ValidationEngineError",
]
