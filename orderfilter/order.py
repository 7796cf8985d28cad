"""Decoded 0x signed orders and their JSON representation."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

__all__ = ["SignedOrder", "NULL_ADDRESS"]

NULL_ADDRESS = "0x" + "0" * 40

# Python attribute -> JSON field, in 0x order-schema order.
_JSON_NAMES: dict[str, str] = {
    "maker_address": "makerAddress",
    "taker_address": "takerAddress",
    "maker_fee": "makerFee",
    "taker_fee": "takerFee",
    "sender_address": "senderAddress",
    "maker_asset_amount": "makerAssetAmount",
    "taker_asset_amount": "takerAssetAmount",
    "maker_asset_data": "makerAssetData",
    "taker_asset_data": "takerAssetData",
    "salt": "salt",
    "exchange_address": "exchangeAddress",
    "fee_recipient_address": "feeRecipientAddress",
    "expiration_time_seconds": "expirationTimeSeconds",
    "signature": "signature",
}

_ADDRESS_FIELDS = frozenset(
    {
        "maker_address",
        "taker_address",
        "sender_address",
        "exchange_address",
        "fee_recipient_address",
    }
)
_BYTES_FIELDS = frozenset({"maker_asset_data", "taker_asset_data", "signature"})


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


def _unhex(value: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"expected 0x-prefixed hex string, got {value!r}")
    return bytes.fromhex(value[2:])


@dataclass(frozen=True)
class SignedOrder:
    """A 0x order together with the maker's signature.

    Amounts, fees, salt and expiration are Python ints; asset data and the
    signature are raw bytes. :meth:`to_json_dict` produces the wire form the
    order schemas validate: lowercase addresses, integers as decimal strings
    and bytes as ``0x``-prefixed hex.
    """

    maker_address: str
    maker_asset_data: bytes
    maker_asset_amount: int
    taker_asset_data: bytes
    taker_asset_amount: int
    exchange_address: str
    expiration_time_seconds: int
    salt: int
    signature: bytes
    taker_address: str = NULL_ADDRESS
    sender_address: str = NULL_ADDRESS
    fee_recipient_address: str = NULL_ADDRESS
    maker_fee: int = 0
    taker_fee: int = 0

    def to_json_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        for attr, name in _JSON_NAMES.items():
            value = getattr(self, attr)
            if attr in _ADDRESS_FIELDS:
                out[name] = str(value).lower()
            elif attr in _BYTES_FIELDS:
                out[name] = _hex(bytes(value))
            else:
                out[name] = str(int(value))
        return out

    @classmethod
    def from_json_dict(cls, data: Mapping[str, Any]) -> "SignedOrder":
        """Build a :class:`SignedOrder` from its JSON form.

        Raises ``KeyError`` for a missing field and ``ValueError`` for a
        malformed one.
        """

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            raw = data[_JSON_NAMES[f.name]]
            if f.name in _ADDRESS_FIELDS:
                kwargs[f.name] = str(raw)
            elif f.name in _BYTES_FIELDS:
                kwargs[f.name] = _unhex(raw)
            else:
                kwargs[f.name] = int(raw)
        return cls(**kwargs)
