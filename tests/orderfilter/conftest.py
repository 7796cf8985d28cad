"""Shared fixtures for orderfilter tests."""

from __future__ import annotations

import pytest

from orderfilter import Filter, SignedOrder
from orderfilter import metrics

from tests.orderfilter.helpers import (
    FEE_RECIPIENT,
    GANACHE_CHAIN_ID,
    GANACHE_EXCHANGE,
    MAKER,
    MAKER_TOKEN,
    NULL_ADDRESS,
    SIGNATURE,
    TAKER_TOKEN,
    erc20_asset_data,
)


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_metrics()
    yield
    metrics.reset_metrics()


@pytest.fixture
def order_json() -> dict[str, str]:
    return {
        "makerAddress": MAKER,
        "takerAddress": NULL_ADDRESS,
        "makerFee": "0",
        "takerFee": "0",
        "senderAddress": NULL_ADDRESS,
        "makerAssetAmount": "100000000000000000000",
        "takerAssetAmount": "42000000000000000000",
        "makerAssetData": erc20_asset_data(MAKER_TOKEN),
        "takerAssetData": erc20_asset_data(TAKER_TOKEN),
        "salt": "1548619145450",
        "exchangeAddress": GANACHE_EXCHANGE,
        "feeRecipientAddress": FEE_RECIPIENT,
        "expirationTimeSeconds": "1548619325",
        "signature": SIGNATURE,
    }


@pytest.fixture
def signed_order() -> SignedOrder:
    return SignedOrder(
        maker_address=MAKER,
        maker_asset_data=bytes.fromhex(erc20_asset_data(MAKER_TOKEN)[2:]),
        maker_asset_amount=100 * 10**18,
        taker_asset_data=bytes.fromhex(erc20_asset_data(TAKER_TOKEN)[2:]),
        taker_asset_amount=42 * 10**18,
        exchange_address=GANACHE_EXCHANGE,
        expiration_time_seconds=1548619325,
        salt=1548619145450,
        signature=bytes.fromhex(SIGNATURE[2:]),
        fee_recipient_address=FEE_RECIPIENT,
    )


@pytest.fixture(scope="module")
def default_filter() -> Filter:
    return Filter(GANACHE_CHAIN_ID)
