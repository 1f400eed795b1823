"""Proxy HTTP API using FastAPI."""
from typing import Callable, Optional
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
import logging
import time

from label_exporter import __version__
from label_exporter.backend import BackendResponse, backend_url, fetch_metrics
from label_exporter.config import ProxyConfig
from label_exporter.errors import BackendUnavailable, RoutingMismatch
from label_exporter.overrides import resolve_overrides
from label_exporter.relabel import inject
from label_exporter.routing import route
from label_exporter.self_metrics import ProxyMetrics

logger = logging.getLogger(__name__)

VIA = f"label-exporter/{__version__}"

Fetcher = Callable[..., BackendResponse]


class ProxyAPI:
    """FastAPI-based relabeling proxy."""

    def __init__(
        self,
        config: ProxyConfig,
        metrics: Optional[ProxyMetrics] = None,
        fetch: Fetcher = fetch_metrics
    ):
        """
        Initialize the proxy.

        Args:
            config: Proxy configuration
            metrics: Counter registry; a private one is created when omitted
            fetch: Backend fetch function, see ``backend.fetch_metrics``
        """
        self.config = config
        self.metrics = metrics or ProxyMetrics()
        self.fetch = fetch
        self.start_time = time.time()
        self.app = FastAPI(title="Label Exporter", version=__version__)

        # Setup routes
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/healthz")
        def healthz():
            """Health check endpoint."""
            return {
                "status": "healthy",
                "uptime_seconds": time.time() - self.start_time,
                "proxy_host": self.config.proxy_host,
                "labels_dir": self.config.labels_dir,
            }

        @self.app.get("/metrics")
        def own_metrics():
            """The proxy's own counters."""
            return Response(content=self.metrics.render(), media_type=CONTENT_TYPE_LATEST)

        # Plain def: Starlette runs each call in its thread pool, so the
        # blocking file reads and backend fetch never stall the event loop.
        @self.app.get("/{full_path:path}")
        def proxy(full_path: str, request: Request):
            """Fetch <port>/<path> from the backend and relabel it."""
            return self.handle(full_path, request)

    def handle(self, full_path: str, request: Request) -> Response:
        try:
            port, path = route(full_path)
        except RoutingMismatch as e:
            logger.debug(str(e))
            self.metrics.record_error("get-port")
            self.metrics.record_request(404)
            return PlainTextResponse("404 page not found\n", status_code=404)

        url = backend_url(self.config.proxy_host, port, path)
        accept = self.config.accept_prefix + request.headers.get("accept", "")

        try:
            backend = self.fetch(url, accept=accept, timeout=self.config.fetch_timeout_s)
        except BackendUnavailable as e:
            logger.error(f"Proxy failed: port={port} path={path} err={e}")
            self.metrics.record_error(e.kind)
            self.metrics.record_request(502, port)
            return PlainTextResponse(f"# {e}", status_code=502, headers={"Via": VIA})

        try:
            overrides = resolve_overrides(
                self.config.labels_dir,
                request.query_params.multi_items(),
                metrics=self.metrics,
                recursive=self.config.labels_recursive
            )
            result = inject(backend.content, overrides, metrics=self.metrics)
        except Exception as e:
            logger.error(f"Relabeling failed: port={port} path={path} err={e}", exc_info=True)
            self.metrics.record_error("relabel")
            self.metrics.record_request(500, port)
            return PlainTextResponse(str(e), status_code=500, headers={"Via": VIA})

        # Replace any upstream Via whatever its case
        headers = {k: v for k, v in backend.headers.items() if k.lower() != "via"}
        headers["Via"] = VIA
        self.metrics.record_request(200, port)
        return Response(content=result.payload, status_code=200, headers=headers)

    def run(self, host: str = "0.0.0.0", port: int = 9900):
        """Run the API server."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=host,
            port=port,
            log_level=self.config.log_level.lower(),
            # Backend Date/Server headers are passed through instead
            server_header=False,
            date_header=False
        )
