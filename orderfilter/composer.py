"""Compose the layered order schemas into compiled validators.

Composition is a pure pipeline: build an immutable mapping from schema id to
schema document, then compile a root schema against a ``referencing``
registry built from that mapping. The order stage registers the built-in
fragments, the chain's ``/exchangeAddress`` fragment and the caller's
``/customOrder`` fragment, and compiles ``/rootOrder``. The message stage
adds ``/rootOrder`` itself by name and compiles ``/rootMessage``, so one
custom schema drives both validators.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping
from urllib.parse import urljoin

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema_specifications import REGISTRY as METASCHEMAS
from referencing import Registry
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7

from .canonical import parse_finite_float, reject_json_constant
from .errors import SchemaCompileError
from .exchange import exchange_address_schema
from .schemas import (
    BUILT_IN_SCHEMAS,
    CUSTOM_ORDER_ID,
    EXCHANGE_ADDRESS_ID,
    ROOT_MESSAGE_SCHEMA,
    ROOT_ORDER_ID,
    ROOT_ORDER_SCHEMA,
    thaw,
)

__all__ = [
    "ComposedSchemas",
    "compose",
    "parse_custom_order_schema",
    "order_schema_set",
]

logger = logging.getLogger(__name__)

# Keywords whose values are data, not subschemas.
_DATA_KEYWORDS = frozenset({"enum", "const", "default", "examples"})
# Keywords whose values map names (not keywords) to subschemas.
_SCHEMA_MAP_KEYWORDS = frozenset(
    {"properties", "patternProperties", "definitions", "dependencies"}
)
# Keywords applying subschemas to the instance being validated, not to a
# member of it. A $ref cycle through these alone never terminates.
_IN_PLACE_LIST_KEYWORDS = ("allOf", "anyOf", "oneOf")
_IN_PLACE_KEYWORDS = ("not", "if", "then", "else")


@dataclass(frozen=True)
class ComposedSchemas:
    """The two compiled validators derived from one custom order schema."""

    order_validator: Draft7Validator
    message_validator: Draft7Validator


def parse_custom_order_schema(text: str | bytes) -> Any:
    """Parse and metaschema-check a custom order schema.

    The text is used verbatim; it is not canonicalized first.
    """

    try:
        schema = json.loads(
            text, parse_constant=reject_json_constant, parse_float=parse_finite_float
        )
    except (ValueError, UnicodeDecodeError, RecursionError) as exc:
        raise SchemaCompileError(
            f"custom order schema is not valid JSON: {exc}", cause=exc
        ) from exc
    if not isinstance(schema, (dict, bool)):
        raise SchemaCompileError(
            f"custom order schema must be a JSON object or boolean, got {type(schema).__name__}"
        )
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as exc:
        raise SchemaCompileError(
            f"invalid custom order schema: {exc.message}", cause=exc
        ) from exc
    except RecursionError as exc:
        raise SchemaCompileError("custom order schema nests too deeply", cause=exc) from exc
    return schema


def order_schema_set(
    exchange_address: Mapping[str, Any], custom_order_schema: Any
) -> Mapping[str, Any]:
    """Return the id -> schema mapping needed to compile ``/rootOrder``."""

    schemas: dict[str, Any] = {EXCHANGE_ADDRESS_ID: dict(exchange_address)}
    for schema_id, fragment in BUILT_IN_SCHEMAS.items():
        schemas[schema_id] = thaw(fragment)
    schemas[CUSTOM_ORDER_ID] = custom_order_schema
    return MappingProxyType(schemas)


def _rebase(node: dict[str, Any], base: str) -> str:
    # Draft 7 ignores the siblings of $ref, $id included.
    node_id = node.get("$id")
    if isinstance(node_id, str) and "$ref" not in node:
        return urljoin(base, node_id)
    return base


def _iter_subschemas(node: Any, base: str) -> Iterator[tuple[dict[str, Any], str]]:
    """Yield every schema object in ``node`` with the base URI enclosing it."""

    if isinstance(node, list):
        for item in node:
            yield from _iter_subschemas(item, base)
        return
    if not isinstance(node, dict):
        return
    yield node, base
    base = _rebase(node, base)
    for key, value in node.items():
        if key in _DATA_KEYWORDS:
            continue
        if key in _SCHEMA_MAP_KEYWORDS and isinstance(value, dict):
            for subschema in value.values():
                yield from _iter_subschemas(subschema, base)
        else:
            yield from _iter_subschemas(value, base)


def _in_place_subschemas(node: dict[str, Any], resolver: Any) -> Iterator[tuple[Any, Any]]:
    """Yield the subschemas applied to the same instance as ``node``.

    Each is paired with the resolver its own references resolve against.
    """

    node_id = node.get("$id")
    if isinstance(node_id, str) and "$ref" not in node:
        resolver = resolver.in_subresource(DRAFT7.create_resource(node))
    ref = node.get("$ref")
    if isinstance(ref, str):
        resolved = resolver.lookup(ref)
        yield resolved.contents, resolved.resolver
        return
    for key in _IN_PLACE_LIST_KEYWORDS:
        subschemas = node.get(key)
        if isinstance(subschemas, list):
            for subschema in subschemas:
                yield subschema, resolver
    for key in _IN_PLACE_KEYWORDS:
        if key in node:
            yield node[key], resolver
    dependencies = node.get("dependencies")
    if isinstance(dependencies, dict):
        for dependency in dependencies.values():
            yield dependency, resolver


def _reject_ref_cycle(
    start: dict[str, Any], resolver: Any, finished: set[int], schema_id: str
) -> None:
    """Raise if ``start`` can reach itself without descending into the instance.

    Such a schema would make validation recurse forever. ``finished`` holds
    the ids of schemas already proven cycle-free and is updated in place.
    """

    if id(start) in finished:
        return
    on_path = {id(start): None}
    frames = [_in_place_subschemas(start, resolver)]
    while frames:
        try:
            step = next(frames[-1], None)
        except Unresolvable as exc:
            raise SchemaCompileError(
                f"unresolvable reference in schema {schema_id!r}", cause=exc
            ) from exc
        if step is None:
            frames.pop()
            done, _ = on_path.popitem()
            finished.add(done)
            continue
        subschema, inner_resolver = step
        if not isinstance(subschema, dict) or id(subschema) in finished:
            continue
        if id(subschema) in on_path:
            raise SchemaCompileError(
                f"schema {schema_id!r} refers back to itself without "
                "descending into the document"
            )
        on_path[id(subschema)] = None
        frames.append(_in_place_subschemas(subschema, inner_resolver))


def _compile(root: dict[str, Any], schemas: Mapping[str, Any]) -> Draft7Validator:
    documents = dict(schemas)
    documents[root["$id"]] = root
    registry: Registry = METASCHEMAS.combine(
        Registry().with_resources(
            (schema_id, DRAFT7.create_resource(contents))
            for schema_id, contents in documents.items()
        )
    )
    finished: set[int] = set()
    try:
        for schema_id, contents in documents.items():
            subschemas = list(_iter_subschemas(contents, schema_id))
            for subschema, base in subschemas:
                ref = subschema.get("$ref")
                if not isinstance(ref, str):
                    continue
                try:
                    registry.resolver(base_uri=base).lookup(ref)
                except Unresolvable as exc:
                    raise SchemaCompileError(
                        f"unresolvable reference {ref!r} in schema {schema_id!r}",
                        cause=exc,
                    ) from exc
            for subschema, base in subschemas:
                _reject_ref_cycle(
                    subschema, registry.resolver(base_uri=base), finished, schema_id
                )
    except RecursionError as exc:
        raise SchemaCompileError("schema nests too deeply", cause=exc) from exc
    return Draft7Validator(root, registry=registry)


def compose(
    chain_id: int,
    custom_order_schema: str | bytes,
    *,
    contract_addresses: Mapping[int, str] | None = None,
) -> ComposedSchemas:
    """Build the order and message validators for ``chain_id``.

    Raises :class:`~orderfilter.errors.NetworkLookupError` when the chain has
    no known exchange deployment and
    :class:`~orderfilter.errors.SchemaCompileError` when the custom schema is
    malformed or references a schema that does not exist.
    """

    # An unknown chain is fatal before the custom schema is looked at.
    exchange = exchange_address_schema(chain_id, custom=contract_addresses)
    custom = parse_custom_order_schema(custom_order_schema)
    order_schemas = order_schema_set(exchange, custom)
    root_order = thaw(ROOT_ORDER_SCHEMA)
    order_validator = _compile(root_order, order_schemas)

    message_schemas = MappingProxyType({**order_schemas, ROOT_ORDER_ID: root_order})
    message_validator = _compile(thaw(ROOT_MESSAGE_SCHEMA), message_schemas)
    logger.debug("Composed order and message schemas for chain ID %s", chain_id)
    return ComposedSchemas(
        order_validator=order_validator, message_validator=message_validator
    )
