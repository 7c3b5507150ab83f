"""Command line entry point."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .app import serve
from .config import load_config
from .errors import BindError, ConfigError
from .logger import LOGGER_NAME, setup_logger

log = logging.getLogger(LOGGER_NAME + ".cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensu-exporter",
        description="Serve Sensu check results as Prometheus metrics.",
    )
    parser.add_argument("-listen", "--listen", dest="listen_address",
                        help="Address to listen on for serving Prometheus Metrics (default :9251).")
    parser.add_argument("-api", "--api", dest="api_url",
                        help="Address to Sensu API (default http://localhost:4567).")
    parser.add_argument("--timeout", type=float, help="Sensu API request timeout in seconds (default 3).")
    parser.add_argument("--cache", action="store_true", default=None,
                        help="Answer scrapes from cached results refreshed in the background.")
    parser.add_argument("--severity", action="store_true", default=None,
                        help="Add check_message and check_severity labels.")
    parser.add_argument("--poll-interval", dest="poll_interval", type=float,
                        help="With --cache, also refresh the cache every N seconds.")
    parser.add_argument("--insecure", dest="verify_tls", action="store_false", default=None,
                        help="Skip TLS certificate verification for the Sensu API.")
    parser.add_argument("--metrics-path", dest="metrics_path", help="Path serving metrics (default /metrics).")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL.")
    parser.add_argument("--config", help="YAML config file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if k != "config"}

    try:
        config = load_config(args.config, overrides)
    except ConfigError as e:
        parser.error(str(e))

    setup_logger(level=config.log_level)

    try:
        serve(config)
    except BindError as e:
        log.critical("%s", e)
        return 1
    except KeyboardInterrupt:
        log.info("shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
