#!/usr/bin/env python3
"""
kv-config Command Line Entry Point

Validates and converts client configuration files.

Usage:
    kv-config validate client.yaml              # Check a config file
    kv-config validate client.conf --format json
    kv-config convert client.yaml --to json     # Print as JSON
    kv-config convert client.json --to yaml -o client.yaml
    kv-config --debug validate client.yaml      # Enable debug logging

Environment Variables:
    KV_CONFIG_FORMAT    - Format assumed for files without a known suffix
    KV_CONFIG_DEBUG     - Enable debug mode (true/false)
    KV_CONFIG_LOG_LEVEL - Log level when debug mode is off
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config.settings import settings
from .config.support import ConfigFormat, dump_config, load_config
from .config.topology_config import TopologyConfig
from .exceptions import ConfigParseError

FORMAT_CHOICES = [fmt.value for fmt in ConfigFormat]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="kv-config",
        description="kv-config: validate and convert key/value client configurations",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser(
        "validate",
        help="Check that a file holds a valid configuration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    validate.add_argument("file", type=Path, help="Configuration file")
    validate.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default=None,
        help="Input format (default: from the file suffix)",
    )

    convert = subparsers.add_parser(
        "convert",
        help="Re-render a configuration in another format",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    convert.add_argument("file", type=Path, help="Configuration file")
    convert.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default=None,
        help="Input format (default: from the file suffix)",
    )
    convert.add_argument(
        "--to",
        choices=FORMAT_CHOICES,
        required=True,
        help="Output format",
    )
    convert.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout)",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def _input_format(args: argparse.Namespace) -> ConfigFormat:
    if args.format:
        return ConfigFormat.from_name(args.format)
    return ConfigFormat.from_path(args.file)


def run_validate(args: argparse.Namespace) -> int:
    """Load a config file and report its topology."""
    config = load_config(args.file, _input_format(args), TopologyConfig)
    topology = config.topology.label if config.topology else "none"
    print(f"{args.file}: OK (topology: {topology})")
    return 0


def run_convert(args: argparse.Namespace) -> int:
    """Load a config file and write it in the requested format."""
    config = load_config(args.file, _input_format(args), TopologyConfig)
    text = dump_config(config, ConfigFormat.from_name(args.to))

    if args.output is None:
        sys.stdout.write(text)
    else:
        args.output.write_text(text, encoding=settings.ENCODING)
        logging.getLogger(__name__).info(f"Wrote {args.to} configuration to {args.output}")
    return 0


COMMANDS = {
    "validate": run_validate,
    "convert": run_convert,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        return COMMANDS[args.command](args)
    except ConfigParseError as e:
        logger.debug(f"Invalid configuration: {e!r}")
        print(f"{args.file}: invalid configuration: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"{args.file}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
