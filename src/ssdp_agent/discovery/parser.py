"""
Stateless parsing of SSDP response datagrams.

A response is treated as a CR LF separated sequence of lines; a header is any
line of the form `<name>:<value>`. No further well-formedness is checked.
"""

LINE_TERMINATOR = "\r\n"
RESPONSE_STATUS_LINE = b"HTTP/1.1 200 OK"


def decode_datagram(data: bytes) -> str:
    """Decode a received datagram, replacing invalid UTF-8 sequences."""
    return data.decode("utf-8", errors="replace")


def is_discovery_response(data: bytes) -> bool:
    """True if the datagram starts with the `HTTP/1.1 200 OK` status line."""
    return data.startswith(RESPONSE_STATUS_LINE)


def split_lines(text: str) -> list[str]:
    return text.split(LINE_TERMINATOR)


def get_header(text: str, name: str) -> str | None:
    """Return the value of the first line matching `<name>:`, or None.

    The name match is exact and case-sensitive and the colon must follow it
    immediately. Leading whitespace of the value is stripped; the rest is kept
    verbatim. A bare `<name>:` line with nothing after the colon does not match.
    """
    prefix = name + ":"
    for line in split_lines(text):
        if len(line) > len(prefix) and line.startswith(prefix):
            return line[len(prefix):].lstrip()
    return None


def headers(text: str) -> dict[str, str]:
    """All `Name: value` header lines, first occurrence wins.

    The status line and blank lines are skipped, as is any line whose name
    would contain whitespace.
    """
    result: dict[str, str] = {}
    for line in split_lines(text)[1:]:
        name, sep, value = line.partition(":")
        if not sep or not name or name != name.strip() or " " in name:
            continue
        result.setdefault(name, value.lstrip())
    return result
