#!/usr/bin/env python3
"""Main entrypoint for checking grok_exporter configuration files."""

import argparse
import logging
import sys
from pathlib import Path
from typing import cast

from grok_exporter.errors import ConfigError
from grok_exporter.loader import dump_config, load_config_file
from grok_exporter.settings import Config


class Args(argparse.Namespace):
    config: Path
    showconfig: bool
    log_level: str
    rich_logs: bool


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> Args:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Load and check a grok_exporter configuration file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "--showconfig",
        action="store_true",
        help="Print the resolved configuration as YAML and exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )

    parser.add_argument(
        "--rich-logs",
        action="store_true",
        help="Enable rich colored logging output",
    )

    return cast(Args, parser.parse_args(argv))


def configure_logging(log_level: str, use_rich: bool = False) -> None:
    """Configure logging with optional rich formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_rich: Whether to use rich colored logging
    """
    if use_rich:
        from rich.console import Console
        from rich.logging import RichHandler

        # Logs go to stderr so --showconfig output stays clean
        console = Console(stderr=True)

        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(
                    console=console,
                    show_path=True,
                    show_time=True,
                    show_level=True,
                    markup=True,
                    rich_tracebacks=True,
                )
            ],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(asctime)s [%(name)s:%(filename)s:%(lineno)d] %(levelname)s: %(message)s",
        )


def describe_config(config: Config) -> str:
    """One-line summary of a loaded configuration."""
    source = f"file {config.input.path}" if config.input.is_file else "stdin"
    return "input=%s, metrics=%d (%s), listening on %s://:%d" % (
        source,
        len(config.metrics),
        ", ".join(config.metric_names),
        config.server.protocol,
        config.server.port,
    )


def main(argv: list[str] | None = None) -> int:
    """Main function."""
    args = parse_args(argv)

    configure_logging(args.log_level, args.rich_logs)

    try:
        config = load_config_file(args.config)

        if args.showconfig:
            logger.info("Printing resolved configuration")
            print(dump_config(config), end="")
            return 0

        logger.info("Configuration OK: %s", describe_config(config))

    except ConfigError as e:
        logger.error("Invalid config: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except Exception as e:
        logger.error("Error loading configuration: %s", e, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
