"""0x exchange contract addresses and the ``/exchangeAddress`` schema fragment."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Mapping

from web3 import Web3

from .errors import NetworkLookupError
from .schemas import EXCHANGE_ADDRESS_ID

__all__ = [
    "EXCHANGE_ADDRESSES",
    "lookup_exchange_address",
    "exchange_address_schema",
    "normalize_contract_addresses",
]

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}\Z")

# Chain ID -> 0x v2 Exchange deployment.
EXCHANGE_ADDRESSES: Mapping[int, str] = MappingProxyType(
    {
        1: "0x080bf510fcbf18b91105470639e9561022937712",  # mainnet
        3: "0xbff9493f92a3df4b0429b6d00743b3cfb4c85831",  # ropsten
        4: "0xbff9493f92a3df4b0429b6d00743b3cfb4c85831",  # rinkeby
        42: "0x30589010550762d2f0d06f650d8e8b6ade6dbf4b",  # kovan
        1337: "0x48bacb9266a570d521063ef5dd96e61686dbe788",  # ganache snapshot
    }
)


def normalize_contract_addresses(addresses: Mapping[Any, Any] | None) -> dict[int, str]:
    """Return ``addresses`` keyed by ``int`` chain ID with checked values.

    Keys may be ints or numeric strings (as they come out of YAML or JSON).
    Raises ``ValueError`` for malformed chain IDs or addresses.
    """

    if not addresses:
        return {}
    normalized: dict[int, str] = {}
    for raw_chain, raw_address in addresses.items():
        try:
            chain_id = int(raw_chain)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid chain ID in contract addresses: {raw_chain!r}") from exc
        if not isinstance(raw_address, str) or not _ADDRESS_RE.match(raw_address):
            raise ValueError(
                f"invalid exchange address for chain ID {chain_id}: {raw_address!r}"
            )
        normalized[chain_id] = raw_address
    return normalized


def lookup_exchange_address(
    chain_id: int, *, custom: Mapping[int, str] | None = None
) -> str:
    """Return the checksummed exchange address deployed on ``chain_id``.

    ``custom`` deployments take precedence over the built-in table, which lets
    private networks and test chains run their own contracts.
    """

    if custom and chain_id in custom:
        address = custom[chain_id]
    else:
        address = EXCHANGE_ADDRESSES.get(chain_id)
    if address is None:
        logger.warning("No exchange deployment known for chain ID %s", chain_id)
        raise NetworkLookupError(chain_id)
    return Web3.to_checksum_address(address)


def exchange_address_schema(
    chain_id: int, *, custom: Mapping[int, str] | None = None
) -> dict[str, Any]:
    """Return the ``/exchangeAddress`` fragment for ``chain_id``.

    The fragment accepts the address in checksummed or all-lowercase form.
    """

    checksummed = lookup_exchange_address(chain_id, custom=custom)
    lowered = checksummed.lower()
    return {
        "$id": EXCHANGE_ADDRESS_ID,
        "anyOf": [
            {"type": "string", "pattern": f"^{checksummed}\\Z"},
            {"type": "string", "pattern": f"^{lowered}\\Z"},
        ],
    }
