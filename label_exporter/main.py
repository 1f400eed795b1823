"""Main entry point for the label exporter."""
import argparse
import logging
import sys

from label_exporter.config import load_config
from label_exporter.proxy_api import ProxyAPI
from label_exporter.self_metrics import ProxyMetrics


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Label Exporter - Inject labels into proxied Prometheus metrics"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to an optional configuration YAML file"
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Address to listen on (default :9900)"
    )
    parser.add_argument(
        "--accept.prefix",
        dest="accept_prefix",
        help="Accept header prefix to be used"
    )
    parser.add_argument(
        "--proxy-host",
        dest="proxy_host",
        help="Host to proxy requests against (default localhost)"
    )
    parser.add_argument(
        "--labels-dir",
        dest="labels_dir",
        help="Directory to find *.label in (default /tmp/target)"
    )
    parser.add_argument(
        "--labels-recursive",
        dest="labels_recursive",
        action="store_true",
        default=None,
        help="Also look for *.label files in subdirectories of --labels-dir"
    )
    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout_s",
        type=float,
        help="Seconds to wait for a backend response (default 10)"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level (default INFO)"
    )
    return parser


def main(argv=None):
    """Main function."""
    args = build_parser().parse_args(argv)
    flags = vars(args)
    config_path = flags.pop("config")

    # Load configuration
    try:
        config = load_config(config_path, overrides=flags)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.log_level)
    logger = logging.getLogger(__name__)

    host, port = config.listen
    logger.info(f"Listening on {config.listen_address}")
    logger.info(f"Looking for labels in: {config.labels_dir}")
    logger.info(f"My metrics: http://{config.listen_address}/metrics")
    logger.info(f"Proxied metrics: http://{config.listen_address}/<port>/metrics")
    logger.info(f"Proxying to: {config.proxy_host}")

    api = ProxyAPI(config, metrics=ProxyMetrics())

    # Run proxy (blocking)
    try:
        api.run(host=host, port=port)
    except Exception as e:
        logger.error(f"Proxy server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
