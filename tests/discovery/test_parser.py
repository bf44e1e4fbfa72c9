"""Tests for the SSDP response parser."""

import pytest

from ssdp_agent.discovery.parser import (
    decode_datagram,
    get_header,
    headers,
    is_discovery_response,
    split_lines,
)
from ssdp_agent.models.entry import CacheEntry


def test_entry_does_parse(hue_response, hue_usn):
    entry = CacheEntry(message=hue_response)

    assert entry.get("USN") == hue_usn
    assert entry.usn == hue_usn
    assert entry.get("nope") is None


def test_get_header_strips_only_leading_whitespace():
    text = "HTTP/1.1 200 OK\r\nSERVER:   Foo/1.0  \r\n\r\n"
    assert get_header(text, "SERVER") == "Foo/1.0  "


def test_get_header_without_space_after_colon():
    assert get_header("HTTP/1.1 200 OK\r\nUSN:uuid:abc\r\n", "USN") == "uuid:abc"


def test_get_header_is_case_sensitive():
    text = "HTTP/1.1 200 OK\r\nserver: lower\r\n"
    assert get_header(text, "SERVER") is None
    assert get_header(text, "server") == "lower"


def test_get_header_requires_colon_directly_after_name():
    text = "HTTP/1.1 200 OK\r\nUSN : spaced\r\nUSNX: longer\r\n"
    assert get_header(text, "USN") is None


def test_get_header_first_match_wins():
    text = "HTTP/1.1 200 OK\r\nUSN: first\r\nUSN: second\r\n"
    assert get_header(text, "USN") == "first"


def test_get_header_ignores_empty_value_line(hue_response):
    # EXT: carries no value and is not reported as a match
    assert get_header(hue_response, "EXT") is None


def test_get_header_value_keeps_inner_colons(hue_response):
    assert get_header(hue_response, "LOCATION") == "http://192.168.1.139:80/description.xml"


def test_get_header_only_splits_on_crlf():
    text = "HTTP/1.1 200 OK\nUSN: uuid:abc\n"
    # Bare LF is not a line terminator, so USN is not at the start of a line.
    assert get_header(text, "USN") is None


def test_get_header_is_repeatable(hue_response):
    results = {get_header(hue_response, "SERVER") for _ in range(5)}
    assert results == {"FreeRTOS/6.0.5, UPnP/1.0, IpBridge/0.1"}


def test_split_lines_preserves_order():
    assert split_lines("a\r\nb\r\n") == ["a", "b", ""]


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"HTTP/1.1 200 OK\r\nUSN: x\r\n", True),
        (b"HTTP/1.1 200 OK", True),
        (b"http/1.1 200 ok\r\nUSN: x\r\n", False),
        (b" HTTP/1.1 200 OK\r\n", False),
        (b"HTTP/1.1 404 Not Found\r\n", False),
        (b"M-SEARCH * HTTP/1.1\r\nHOST: 239.255.255.250:1900\r\n", False),
        (b"NOTIFY * HTTP/1.1\r\nUSN: uuid:abc\r\n", False),
        (b"", False),
    ],
)
def test_is_discovery_response(data, expected):
    assert is_discovery_response(data) is expected


def test_decode_datagram_replaces_invalid_bytes():
    text = decode_datagram(b"HTTP/1.1 200 OK\r\nUSN: uuid:\xff\xfe\r\n")
    assert text.startswith("HTTP/1.1 200 OK")
    assert get_header(text, "USN") == "uuid:\ufffd\ufffd"


def test_headers_collects_named_lines(hue_response, hue_usn):
    parsed = headers(hue_response)
    assert parsed["SERVER"] == "FreeRTOS/6.0.5, UPnP/1.0, IpBridge/0.1"
    assert parsed["USN"] == hue_usn
    assert parsed["EXT"] == ""
    assert "HTTP/1.1 200 OK" not in parsed
