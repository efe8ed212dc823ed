"""
Connection string token parsing.

Event Hubs connection strings are `;`-separated `key=value` pairs:

    Endpoint=sb://mynamespace.servicebus.windows.net/;SharedAccessKeyName=...;SharedAccessKey=...

Keys are matched case-insensitively and surrounding whitespace is ignored.
Only the first `=` splits a pair, so base64 key values keep their padding.

Exports:
    ENDPOINT_KEY: Name of the endpoint token
    parse_connection_string_token: Value of one key
    parse_namespace_name: First DNS label of an endpoint
"""

from typing import Optional
from urllib.parse import urlsplit

ENDPOINT_KEY = "Endpoint"


def parse_connection_string_token(connection_string: str, key: str) -> Optional[str]:
    """
    Return the value of `key` in a connection string, or None if absent.

    Empty values are reported as None.
    """
    if not connection_string:
        return None

    wanted = key.strip().lower()
    for segment in connection_string.split(";"):
        name, separator, value = segment.partition("=")
        if not separator:
            continue
        if name.strip().lower() == wanted:
            value = value.strip()
            return value or None
    return None


def parse_namespace_name(endpoint: str) -> Optional[str]:
    """
    Return the leading DNS label of an endpoint's host.

    Accepts URIs (`sb://foo.servicebus.windows.net/`) and bare hosts
    (`foo.servicebus.windows.net`). Ports and paths are ignored.

    Example:
        parse_namespace_name("sb://foo.example.com/") -> "foo"
    """
    if not endpoint:
        return None

    endpoint = endpoint.strip()
    if "://" not in endpoint:
        endpoint = f"sb://{endpoint}"

    host = urlsplit(endpoint).hostname
    if not host:
        return None

    label = host.split(".", 1)[0]
    return label or None
