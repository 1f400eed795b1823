"""Self-monitoring metrics for the proxy, exposed on /metrics."""
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest


class ProxyMetrics:
    """Process-wide counters.

    Each instance owns its registry (a fresh one unless given), so building
    one in a test never touches the global default registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, prefix: str = "label_exporter_"):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.requests_total = Counter(
            f"{prefix}requests",
            "The number of localhost:port/path requests served.",
            ["code", "port"],
            registry=registry
        )

        self.metrics_unprocessed_total = Counter(
            f"{prefix}metrics_unprocessed",
            "The number of metrics unable to be processed.",
            registry=registry
        )

        self.errors_total = Counter(
            f"{prefix}errors",
            "The number of errors.",
            ["type"],
            registry=registry
        )

    def record_request(self, code: int, port: str = ""):
        """Record one served request."""
        self.requests_total.labels(code=str(code), port=port).inc()

    def record_unprocessed(self, count: int = 1):
        """Record sample lines that could not be relabeled."""
        if count > 0:
            self.metrics_unprocessed_total.inc(count)

    def record_error(self, kind: str):
        """Record an error by kind."""
        self.errors_total.labels(type=kind).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)
