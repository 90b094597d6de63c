"""
Host string parser for CLI targets

Handles parsing of host strings in various formats:
- hostname
- user@hostname
- user@hostname:port
"""
from typing import Optional, Tuple


def parse_host_string(host: str, user: Optional[str] = None, port: Optional[int] = None) -> Tuple[str, Optional[str], Optional[int]]:
    """
    Parse host string into components.

    Explicit ``user`` / ``port`` arguments win over values in the string.

    Args:
        host: Host string (may include user and port)
        user: Optional user override
        port: Optional port override

    Returns:
        Tuple of (hostname, user, port)

    Examples:
        parse_host_string("server") -> ("server", None, None)
        parse_host_string("user@server") -> ("server", "user", None)
        parse_host_string("server:2222") -> ("server", None, 2222)
        parse_host_string("user@server:2222", port=3333) -> ("server", "user", 3333)
    """
    parsed_user = user
    host_part = host

    if "@" in host:
        name, host_part = host.split("@", 1)
        parsed_user = user or name or None

    parsed_host = host_part
    parsed_port = port
    # A single colon separates the port; more than one means a bare IPv6 address
    if host_part.count(":") == 1:
        name, port_text = host_part.split(":", 1)
        try:
            port_value = int(port_text)
        except ValueError:
            port_value = None
        if port_value is not None:
            parsed_host = name
            parsed_port = port if port is not None else port_value
    elif host_part.startswith("[") and "]:" in host_part:
        name, port_text = host_part[1:].split("]:", 1)
        parsed_host = name
        if port is None and port_text.isdigit():
            parsed_port = int(port_text)

    return parsed_host, parsed_user, parsed_port
