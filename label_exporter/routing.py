"""Mapping of inbound request paths to backend port and path."""
import re
from typing import Tuple

from label_exporter.errors import RoutingMismatch

PORT_PATH_RE = re.compile(r"^([0-9]+)(/.*)?$", re.DOTALL)


def route(path: str) -> Tuple[str, str]:
    """
    Split a request path into backend port and subpath.

    Args:
        path: Request path without its leading slash, e.g. ``8080/metrics``

    Returns:
        Tuple of (port, subpath); subpath is "" when the path is just a port

    Raises:
        RoutingMismatch: If the path does not start with a numeric port
    """
    match = PORT_PATH_RE.match(path)
    if not match:
        raise RoutingMismatch(f"Regex parsing of path failed: {path!r}")
    return match.group(1), match.group(2) or ""
