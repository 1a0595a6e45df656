from __future__ import annotations

import pytest

from restvalve.exceptions import UnsupportedOperationError
from restvalve.structures import HttpHeaders, HttpMethod


def test_http_method_resolves_names_case_insensitively():
    assert HttpMethod.resolve("get") is HttpMethod.GET
    assert HttpMethod.resolve("Options") is HttpMethod.OPTIONS
    assert HttpMethod.resolve(HttpMethod.DELETE) is HttpMethod.DELETE
    assert str(HttpMethod.PUT) == "PUT"


def test_http_method_validates_input():
    with pytest.raises(ValueError, match="Unsupported HTTP method"):
        HttpMethod.resolve("FETCH")

    with pytest.raises(TypeError, match="method must be HttpMethod or str"):
        HttpMethod.resolve(1)  # type: ignore[arg-type]


def test_headers_keep_values_in_insertion_order():
    headers = HttpHeaders()
    headers.add("MyHeader", "value1")
    headers.add("Accept", "text/plain")
    headers.add("myheader", "value2")

    assert headers["MyHeader"] == ["value1", "value2"]
    assert headers["MYHEADER"] == ["value1", "value2"]
    assert list(headers) == ["MyHeader", "Accept"]
    assert headers.multi_items() == [
        ("MyHeader", "value1"),
        ("MyHeader", "value2"),
        ("Accept", "text/plain"),
    ]


def test_headers_lookup_is_case_insensitive():
    headers = HttpHeaders({"Content-Type": "text/plain"})

    assert "content-type" in headers
    assert "CONTENT-TYPE" in headers
    assert 1 not in headers
    assert headers.get_first("content-type") == "text/plain"
    assert headers.get_first("missing", "default") == "default"
    assert headers.get("missing") is None


def test_headers_accept_pairs_and_lists():
    headers = HttpHeaders([("X-A", "1"), ("x-a", "2"), ("X-B", "3")])
    copied = HttpHeaders(headers)

    assert headers["X-A"] == ["1", "2"]
    assert copied == headers
    assert len(copied) == 2


def test_headers_set_replaces_and_delete_removes():
    headers = HttpHeaders()
    headers.add("X-A", "1")
    headers.add("X-A", "2")

    headers.set("x-a", "3")
    assert headers["X-A"] == ["3"]

    headers["X-B"] = ["4", "5"]
    assert headers["x-b"] == ["4", "5"]

    del headers["X-B"]
    assert "X-B" not in headers

    with pytest.raises(ValueError, match="at least one value"):
        headers["X-C"] = []


def test_headers_return_copies_of_value_lists():
    headers = HttpHeaders({"X-A": "1"})

    headers["X-A"].append("2")

    assert headers["X-A"] == ["1"]


def test_headers_validate_types():
    headers = HttpHeaders()

    with pytest.raises(TypeError, match="header name must be str"):
        headers.add(1, "x")  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="header value must be str"):
        headers.add("X-A", 1)  # type: ignore[arg-type]


def test_content_length_and_type_properties():
    headers = HttpHeaders()
    assert headers.content_length is None
    assert headers.content_type is None

    headers.content_length = 11
    headers.content_type = "text/plain; charset=utf-8"

    assert headers["Content-Length"] == ["11"]
    assert headers.content_length == 11
    assert headers.content_type == "text/plain; charset=utf-8"

    with pytest.raises(ValueError):
        headers.content_length = -1


def test_frozen_headers_reject_every_mutation():
    headers = HttpHeaders({"X-A": "1"})
    headers.freeze()

    assert headers.read_only
    for mutate in (
        lambda: headers.add("X-A", "2"),
        lambda: headers.set("X-A", "2"),
        lambda: headers.__setitem__("X-B", "2"),
        lambda: headers.__delitem__("X-A"),
        lambda: headers.pop("X-A"),
        lambda: headers.clear(),
        lambda: headers.update({"X-C": "3"}),
        lambda: setattr(headers, "content_length", 3),
    ):
        with pytest.raises(UnsupportedOperationError):
            mutate()

    assert headers["X-A"] == ["1"]


def test_read_only_constructor_flag():
    headers = HttpHeaders([("X-A", "1")], read_only=True)

    assert headers["X-A"] == ["1"]
    with pytest.raises(UnsupportedOperationError):
        headers.add("X-A", "2")


def test_failed_replace_leaves_values_untouched():
    headers = HttpHeaders({"A": "1"})

    with pytest.raises(TypeError, match="header value must be str"):
        headers["A"] = ["2", 3]  # type: ignore[list-item]
    with pytest.raises(ValueError, match="at least one value"):
        headers["A"] = []

    assert headers.multi_items() == [("A", "1")]


@pytest.mark.parametrize("value", ["eleven", "", "-1", "1.5"])
def test_invalid_content_length_is_reported(value):
    headers = HttpHeaders({"Content-Length": value})

    with pytest.raises(ValueError, match="Invalid Content-Length header value"):
        headers.content_length


def test_header_dict_copy_keeps_repeated_lines():
    headers = HttpHeaders([("X-A", "1"), ("x-a", "2")], read_only=True)

    lines = headers.as_header_dict()
    lines.add("X-B", "3")

    assert list(lines.iteritems()) == [("X-A", "1"), ("X-A", "2"), ("X-B", "3")]
    assert "X-B" not in headers
