"""
Event Hubs namespace handle.

A namespace is the container for every Event Hub a test run creates. It
lives for the whole session: either referenced through a connection string
supplied by the environment, or provisioned at session start and deleted
at session end by the orchestrator.

Exports:
    NamespaceProperties: Name, connection string and ownership of a namespace
    parse_namespace_properties: Build properties from a connection string
    generate_namespace_name: Unique name for a provisioned namespace
"""

import uuid
from dataclasses import dataclass, field

from config.defaults import NamespaceDefaults
from exceptions import ConnectionStringError
from infrastructure.connection_string import ENDPOINT_KEY, parse_connection_string_token, parse_namespace_name


@dataclass(frozen=True)
class NamespaceProperties:
    """
    Key attributes for identifying and accessing a namespace.

    Attributes:
        name: Namespace name (first DNS label of its endpoint)
        connection_string: Connection string for data-plane clients
        was_created: True if this run provisioned the namespace and must delete it
    """
    name: str
    connection_string: str = field(repr=False)
    was_created: bool


def parse_namespace_properties(connection_string: str) -> NamespaceProperties:
    """
    Populate NamespaceProperties from an existing namespace's connection string.

    No network call is made. The namespace is marked as not created, so the
    session never deletes it.

    Raises:
        ConnectionStringError: No Endpoint key, or an endpoint without a host.
    """
    endpoint = parse_connection_string_token(connection_string, ENDPOINT_KEY)
    if not endpoint:
        raise ConnectionStringError("An endpoint could not be found in the passed connection string")

    name = parse_namespace_name(endpoint)
    if not name:
        raise ConnectionStringError(f"A namespace name could not be parsed from endpoint '{endpoint}'")

    return NamespaceProperties(name=name, connection_string=connection_string, was_created=False)


def generate_namespace_name() -> str:
    """Globally unique namespace name within the 50 character limit."""
    name = f"{NamespaceDefaults.NAME_PREFIX}{uuid.uuid4()}"
    return name[:NamespaceDefaults.NAME_MAX_LENGTH]
