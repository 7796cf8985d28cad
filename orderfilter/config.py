from __future__ import annotations

"""Configuration for building order filters from YAML and the environment."""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml  # type: ignore[import-untyped]

from .cache import FilterCache
from .exchange import normalize_contract_addresses
from .filter import Filter
from .schemas import DEFAULT_CUSTOM_ORDER_SCHEMA

__all__ = ["OrderFilterConfig", "load_config", "apply_env_overrides"]

logger = logging.getLogger(__name__)

_ALIASES: dict[str, str] = {
    "network_id": "chain_id",
    "ethereum_chain_id": "chain_id",
    "custom_order_schema_path": "custom_order_schema_file",
    "custom_contract_addresses": "contract_addresses",
}


@dataclass
class OrderFilterConfig:
    """Settings for the filter a node validates orders with."""

    chain_id: int = field(default=1337, metadata={"env": "ORDERFILTER_CHAIN_ID"})
    custom_order_schema: str = field(
        default=DEFAULT_CUSTOM_ORDER_SCHEMA,
        metadata={"env": "ORDERFILTER_CUSTOM_ORDER_SCHEMA"},
    )
    custom_order_schema_file: Optional[str] = field(
        default=None, metadata={"env": "ORDERFILTER_CUSTOM_ORDER_SCHEMA_FILE"}
    )
    contract_addresses: Dict[int, str] = field(default_factory=dict)
    filter_cache_size: int = field(
        default=128, metadata={"env": "ORDERFILTER_FILTER_CACHE_SIZE"}
    )

    def __post_init__(self) -> None:
        self.chain_id = int(self.chain_id)
        self.filter_cache_size = int(self.filter_cache_size)
        if self.filter_cache_size <= 0:
            raise ValueError("filter_cache_size must be positive")
        if isinstance(self.custom_order_schema, (dict, bool)):
            # Inline YAML schemas arrive already decoded.
            self.custom_order_schema = json.dumps(self.custom_order_schema)
        elif not isinstance(self.custom_order_schema, str):
            raise TypeError("custom_order_schema must be a JSON string or mapping")
        self.contract_addresses = normalize_contract_addresses(self.contract_addresses)

    def resolve_custom_order_schema(self) -> str:
        """Return the schema text, reading ``custom_order_schema_file`` if set."""

        if self.custom_order_schema_file:
            path = Path(self.custom_order_schema_file).expanduser()
            return path.read_text(encoding="utf-8")
        return self.custom_order_schema

    def build_filter(self) -> Filter:
        return Filter(
            self.chain_id,
            self.resolve_custom_order_schema(),
            contract_addresses=self.contract_addresses,
        )

    def build_cache(self) -> FilterCache:
        return FilterCache(
            self.filter_cache_size, contract_addresses=self.contract_addresses
        )


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Return ``data`` with values from ``ORDERFILTER_*`` variables applied."""

    env = os.environ if environ is None else environ
    merged = dict(data)
    for f in fields(OrderFilterConfig):
        key = f.metadata.get("env")
        if key and key in env:
            merged[f.name] = env[key]
    return merged


def load_config(
    path: str | None = None, *, environ: Mapping[str, str] | None = None
) -> OrderFilterConfig:
    """Load :class:`OrderFilterConfig` from a YAML file and the environment.

    The file may hold the settings at the top level or under an
    ``orderfilter`` section. With no ``path`` only defaults and environment
    overrides apply.
    """

    data: Any = {}
    if path is not None:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                try:
                    data = yaml.safe_load(fh) or {}
                except yaml.YAMLError as exc:
                    logger.error("Failed to parse configuration file %s: %s", path, exc)
                    raise ValueError(f"Failed to parse configuration file {path}") from exc
        except (FileNotFoundError, OSError) as exc:
            logger.error("Unable to open configuration file %s: %s", path, exc)
            raise
    if not isinstance(data, dict):
        raise TypeError("orderfilter config must be a mapping")
    section = data.get("orderfilter", data)
    if not isinstance(section, dict):
        raise TypeError("orderfilter config section must be a mapping")
    section = dict(section)
    for alias, canonical in _ALIASES.items():
        if canonical in section:
            section.pop(alias, None)
        elif alias in section:
            section[canonical] = section.pop(alias)
    known = {f.name for f in fields(OrderFilterConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning("Ignoring unknown orderfilter config keys: %s", unknown)
        for key in unknown:
            section.pop(key)
    return OrderFilterConfig(**apply_env_overrides(section, environ))
