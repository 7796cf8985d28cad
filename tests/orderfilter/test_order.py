from __future__ import annotations

import pytest

from orderfilter import SignedOrder
from orderfilter.order import NULL_ADDRESS


def test_to_json_dict_matches_wire_form(signed_order: SignedOrder, order_json: dict) -> None:
    assert signed_order.to_json_dict() == order_json


def test_addresses_are_lowercased(signed_order: SignedOrder) -> None:
    order = SignedOrder(
        maker_address="0x6ECBE1DB9EF729CBE972C83FB886247691FB6BEB",
        maker_asset_data=b"",
        maker_asset_amount=1,
        taker_asset_data=b"\x01",
        taker_asset_amount=2,
        exchange_address=signed_order.exchange_address,
        expiration_time_seconds=3,
        salt=4,
        signature=b"\x02",
    )
    data = order.to_json_dict()
    assert data["makerAddress"] == "0x6ecbe1db9ef729cbe972c83fb886247691fb6beb"
    assert data["makerAssetData"] == "0x"
    assert data["takerAssetData"] == "0x01"
    assert data["takerAddress"] == NULL_ADDRESS
    assert data["makerFee"] == "0"


def test_from_json_dict_inverts_to_json_dict(signed_order: SignedOrder, order_json: dict) -> None:
    assert SignedOrder.from_json_dict(order_json) == signed_order


def test_from_json_dict_reports_missing_and_malformed_fields(order_json: dict) -> None:
    broken = dict(order_json)
    del broken["salt"]
    with pytest.raises(KeyError):
        SignedOrder.from_json_dict(broken)
    order_json["signature"] = "1b"
    with pytest.raises(ValueError):
        SignedOrder.from_json_dict(order_json)
