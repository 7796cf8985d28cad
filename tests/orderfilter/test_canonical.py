from __future__ import annotations

import pytest

from orderfilter import SchemaCompileError, canonicalize
from orderfilter.canonical import canonical_dumps


def test_keys_are_sorted_and_whitespace_dropped() -> None:
    text = '{\n  "required": ["b", "a"],\n  "properties" : { "z": {}, "a": {"const": null} }\n}'
    assert canonicalize(text) == b'{"properties":{"a":{"const":null},"z":{}},"required":["b","a"]}'


def test_key_order_and_whitespace_do_not_matter() -> None:
    assert canonicalize('{"a":1,"b":[true,false]}') == canonicalize(' { "b" : [ true , false ] , "a" : 1 } ')


def test_accepts_bytes() -> None:
    assert canonicalize(b'{"x": "y"}') == b'{"x":"y"}'


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", b"0"),
        ("-17", b"-17"),
        ("1.0", b"1"),
        ("-2.5e10", b"-25000000000"),
        ("1.5", b"1.5E0"),
        ("0.00125", b"1.25E-3"),
        ("100.5", b"1.005E2"),
        ("-0.5", b"-5.0E-1"),
        ("0.1", b"1.0E-1"),
        ("1e21", b"1.0E21"),
        ("1.5e300", b"1.5E300"),
        ("123456789012345678901234567890", b"123456789012345678901234567890"),
    ],
)
def test_numbers_have_a_single_spelling(text: str, expected: bytes) -> None:
    assert canonicalize(text) == expected


def test_strings_keep_unicode_and_escape_only_what_json_requires() -> None:
    assert canonicalize('"caf\\u00e9 \\"q\\" \\/"') == '"café \\"q\\" /"'.encode("utf-8")
    assert canonicalize('"line\\nbreak\\u0001"') == b'"line\\nbreak\\u0001"'


@pytest.mark.parametrize(
    "text", ["{", "{'a': 1}", "NaN", '{"a": Infinity}', "", '{"maximum": 1e400}', "-1E999"]
)
def test_invalid_json_is_a_schema_error(text: str) -> None:
    with pytest.raises(SchemaCompileError):
        canonicalize(text)


def test_canonical_dumps_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError):
        canonical_dumps({"a": object()})


def test_fractions_always_have_a_fraction_digit() -> None:
    assert canonicalize('{"multipleOf": 0.5}') == b'{"multipleOf":5.0E-1}'


def test_lone_surrogates_stay_escaped() -> None:
    assert canonicalize('{"description": "\\ud800"}') == b'{"description":"\\ud800"}'
    assert canonicalize('"a\\uDFFFb"') == b'"a\\udfffb"'


def test_surrogate_pairs_become_utf8() -> None:
    assert canonicalize('"\\ud83d\\ude00"') == '"\U0001F600"'.encode("utf-8")


def test_deeply_nested_document_is_a_schema_error() -> None:
    with pytest.raises(SchemaCompileError):
        canonicalize("[" * 100_000 + "]" * 100_000)
