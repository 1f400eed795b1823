"""HTTP client for the backend metrics endpoints."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from label_exporter.errors import BackendUnavailable

logger = logging.getLogger(__name__)

# requests hands back a decoded, de-chunked body, so framing headers are
# recomputed by the proxy instead of passed through.
SKIPPED_HEADERS = {"content-length", "content-encoding", "transfer-encoding", "connection"}


@dataclass
class BackendResponse:
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)


def backend_url(proxy_host: str, port: str, path: str) -> str:
    return f"http://{proxy_host}:{port}{path}"


def fetch_metrics(url: str, accept: Optional[str] = None, timeout: float = 10.0) -> BackendResponse:
    """
    Fetch a raw metrics payload.

    Args:
        url: Backend URL
        accept: Accept header to send, if any
        timeout: Seconds to wait for connect and for each read

    Returns:
        Payload bytes and the response headers worth passing through

    Raises:
        BackendUnavailable: On connection failure, timeout or a non-200 status
    """
    headers = {"Accept": accept} if accept else {}
    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise BackendUnavailable(f"Failed to fetch downstream metrics: {e}", "http-get") from e

    if resp.status_code != 200:
        raise BackendUnavailable(
            f"Failed to fetch downstream metrics: {url} returned {resp.status_code}", "http-status"
        )

    passed = {
        name: value
        for name, value in resp.headers.items()
        if name.lower() not in SKIPPED_HEADERS
    }
    logger.debug(f"Fetched {len(resp.content)} bytes from {url}")
    return BackendResponse(content=resp.content, headers=passed)
