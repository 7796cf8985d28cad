"""Exception types raised by :mod:`orderfilter`."""

from __future__ import annotations

__all__ = [
    "OrderFilterError",
    "NetworkLookupError",
    "SchemaCompileError",
    "TopicFormatError",
    "WrongVersionError",
    "Base64DecodeError",
    "ValidationEngineError",
]


class OrderFilterError(Exception):
    """Base class for all orderfilter errors."""
    pass


class NetworkLookupError(OrderFilterError, LookupError):
    """Raised when no exchange deployment is known for a chain ID."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"no contract addresses for chain ID {chain_id}")
        self.chain_id = chain_id


class SchemaCompileError(OrderFilterError, ValueError):
    """Raised when a custom order schema cannot be parsed or compiled.

    ``cause`` holds the diagnostic reported by the JSON Schema engine (or the
    JSON parser) when there is one.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class TopicFormatError(OrderFilterError, ValueError):
    """Raised when a topic string does not follow the topic grammar."""

    def __init__(self, topic: str, reason: str) -> None:
        super().__init__(f"{reason}: {topic!r}")
        self.topic = topic
        self.reason = reason


class WrongVersionError(OrderFilterError):
    """Raised when a topic carries a protocol version other than ours."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"wrong topic version: expected {expected} but got {actual}"
        )
        self.expected = expected
        self.actual = actual


class Base64DecodeError(OrderFilterError, ValueError):
    """Raised when the schema segment of a topic is not valid base64url."""

    def __init__(self, segment: str) -> None:
        super().__init__(f"could not base64-decode order schema: {segment!r}")
        self.segment = segment


class ValidationEngineError(OrderFilterError, RuntimeError):
    """Raised when a document could not be evaluated at all.

    An invalid document is not an error; this covers unparseable input and
    failures inside the JSON Schema engine.
    """
    pass
