import decimal
import uuid

import pytest
from tern.params import flatten, quote, urlencode


def test_flatten_sorts_keys():
    assert flatten({"b": 1, "a": 2}) == [("a", "2"), ("b", "1")]
    assert flatten(dict([("a", 2), ("b", 1)])) == flatten(dict([("b", 1), ("a", 2)]))


def test_flatten_nested_mapping_and_sequence():
    assert flatten({"f": {"z": "1", "a": [1, 2]}}) == [
        ("f[a][]", "1"),
        ("f[a][]", "2"),
        ("f[z]", "1"),
    ]


@pytest.mark.parametrize("value", [[1, 2, 3], (1, 2), "text", 1, True])
def test_flatten_without_key_is_empty(value):
    assert flatten(value) == []


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (1.5, "1.5"),
        (decimal.Decimal("1.10"), "1.10"),
        (uuid.UUID(int=1), "00000000-0000-0000-0000-000000000001"),
        ("", ""),
    ],
)
def test_flatten_scalars(value, expected):
    assert flatten({"k": value}) == [("k", expected)]


@pytest.mark.parametrize("value", [b"bytes", bytearray(b"x"), object()])
def test_flatten_skips_values_without_text(value):
    assert flatten({"k": value, "z": "1"}) == [("z", "1")]


def test_flatten_sequence_of_mappings():
    assert flatten({"u": [{"b": 1, "a": 2}, {"c": 3}]}) == [
        ("u[][a]", "2"),
        ("u[][b]", "1"),
        ("u[][c]", "3"),
    ]


def test_flatten_stringifies_keys():
    assert flatten({2: "b", 10: "a"}) == [("10", "a"), ("2", "b")]


@pytest.mark.parametrize(
    ["text", "expected"],
    [
        ("abcXYZ019", "abcXYZ019"),
        ("*-._", "*-._"),
        ("a b", "a+b"),
        ("~", "%7E"),
        (":;<=>?@", "%3A%3B%3C%3D%3E%3F%40"),
        ("[]", "%5B%5D"),
        ("\n", "%0A"),
        ("é", "%C3%A9"),
    ],
)
def test_quote(text, expected):
    assert quote(text) == expected


def test_urlencode():
    pairs = flatten({"f": {"z": "1", "a": [1, 2]}, "q": "x y"})
    assert urlencode(pairs) == "f%5Ba%5D%5B%5D=1&f%5Ba%5D%5B%5D=2&f%5Bz%5D=1&q=x+y"


def test_urlencode_empty():
    assert urlencode([]) == ""
