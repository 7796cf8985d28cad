from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from orderfilter import OrderFilterConfig, encode_topic, load_config
from orderfilter.config import apply_env_overrides

from tests.orderfilter.helpers import GANACHE_CHAIN_ID

CUSTOM_EXCHANGE = "0x" + "12" * 20


def test_defaults_without_file() -> None:
    config = load_config(environ={})
    assert config == OrderFilterConfig()
    assert config.chain_id == GANACHE_CHAIN_ID
    assert config.custom_order_schema == "{}"
    assert config.custom_order_schema_file is None
    assert config.contract_addresses == {}
    assert config.filter_cache_size == 128


def test_load_top_level_settings(tmp_path: Path) -> None:
    path = tmp_path / "orderfilter.yml"
    path.write_text(
        "chain_id: 42\n"
        "custom_order_schema: '{\"required\": [\"salt\"]}'\n"
        "filter_cache_size: 16\n"
    )
    config = load_config(str(path), environ={})
    assert config.chain_id == 42
    assert config.custom_order_schema == '{"required": ["salt"]}'
    assert config.filter_cache_size == 16


def test_load_section_with_aliases_and_inline_schema(tmp_path: Path) -> None:
    path = tmp_path / "node.yml"
    path.write_text(
        "orderfilter:\n"
        "  network_id: 31337\n"
        "  custom_contract_addresses:\n"
        f"    31337: '{CUSTOM_EXCHANGE}'\n"
        "  custom_order_schema:\n"
        "    properties:\n"
        "      makerAssetData:\n"
        "        const: '0xaaaa'\n"
    )
    config = load_config(str(path), environ={})
    assert config.chain_id == 31337
    assert config.contract_addresses == {31337: CUSTOM_EXCHANGE}
    assert json.loads(config.custom_order_schema) == {
        "properties": {"makerAssetData": {"const": "0xaaaa"}}
    }
    assert config.build_filter().chain_id == 31337


def test_canonical_key_wins_over_alias(tmp_path: Path) -> None:
    path = tmp_path / "c.yml"
    path.write_text("chain_id: 1\nnetwork_id: 42\n")
    assert load_config(str(path), environ={}).chain_id == 1


def test_unknown_keys_are_dropped_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "c.yml"
    path.write_text("chain_id: 3\nbootstrap_peers: []\n")
    with caplog.at_level(logging.WARNING, logger="orderfilter.config"):
        config = load_config(str(path), environ={})
    assert config.chain_id == 3
    assert "bootstrap_peers" in caplog.text


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "c.yml"
    path.write_text("chain_id: 3\nfilter_cache_size: 8\n")
    environ = {
        "ORDERFILTER_CHAIN_ID": "4",
        "ORDERFILTER_CUSTOM_ORDER_SCHEMA": '{"required": ["makerFee"]}',
        "ORDERFILTER_FILTER_CACHE_SIZE": "2",
        "UNRELATED": "x",
    }
    config = load_config(str(path), environ=environ)
    assert config.chain_id == 4
    assert config.custom_order_schema == '{"required": ["makerFee"]}'
    assert config.filter_cache_size == 2


def test_apply_env_overrides_leaves_input_untouched() -> None:
    data = {"chain_id": 1}
    merged = apply_env_overrides(data, {"ORDERFILTER_CHAIN_ID": "42"})
    assert merged == {"chain_id": "42"}
    assert data == {"chain_id": 1}


def test_schema_file_takes_precedence(tmp_path: Path) -> None:
    schema_path = tmp_path / "schema.json"
    schema_path.write_text('{"required": ["salt"]}')
    environ = {"ORDERFILTER_CUSTOM_ORDER_SCHEMA_FILE": str(schema_path)}
    config = load_config(environ=environ)
    assert config.resolve_custom_order_schema() == '{"required": ["salt"]}'
    assert config.build_filter().raw_custom_order_schema == '{"required": ["salt"]}'


def test_build_cache_uses_configured_size() -> None:
    config = OrderFilterConfig(filter_cache_size=3, contract_addresses={"9": CUSTOM_EXCHANGE})
    cache = config.build_cache()
    assert cache.get_or_create(encode_topic(9, "{}")).chain_id == 9


def test_invalid_yaml_raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.yml"
    path.write_text("chain_id: [1, 2\n")
    with pytest.raises(ValueError):
        load_config(str(path), environ={})


@pytest.mark.parametrize("content", ["- 1\n- 2\n", "orderfilter: 5\n"])
def test_non_mapping_config_raises_type_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "c.yml"
    path.write_text(content)
    with pytest.raises(TypeError):
        load_config(str(path), environ={})


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.yml"), environ={})


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert load_config(str(path), environ={}) == OrderFilterConfig()


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"filter_cache_size": 0}, ValueError),
        ({"chain_id": "mainnet"}, ValueError),
        ({"custom_order_schema": 7}, TypeError),
        ({"contract_addresses": {1: "nope"}}, ValueError),
    ],
)
def test_invalid_values_are_rejected(kwargs: dict, error: type) -> None:
    with pytest.raises(error):
        OrderFilterConfig(**kwargs)
