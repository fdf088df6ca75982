"""
Command-line interface for conjurconf.

Provides commands to inspect, validate and create Conjur client
configuration.

Uses Python's argparse module (no external CLI libraries).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

from conjurconf import __version__
from conjurconf.config.loader import get_config_path, load_config, save_config
from conjurconf.config.settings import (
    Config,
    ConfigurationError,
    ConfigurationValidationError,
    config_errors,
    config_to_dict,
    conjurrc,
)

# Set up logging
logger = logging.getLogger(__name__)

# Global verbosity settings (set during main() based on args)
_quiet_mode = False


def set_output_mode(quiet: bool = False) -> None:
    """Set whether non-essential output is suppressed."""
    global _quiet_mode
    _quiet_mode = quiet


def output(message: str = "", force: bool = False) -> None:
    """
    Print a message to stdout, respecting quiet mode.

    Args:
        message: The message to print.
        force: If True, print even in quiet mode (for essential output like YAML/JSON).
    """
    if force or not _quiet_mode:
        print(message)


def output_error(message: str) -> None:
    """Print an error message (always shown, even in quiet mode)."""
    print(message, file=sys.stderr)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the conjurconf CLI."""
    parser = argparse.ArgumentParser(
        prog="conjurconf",
        description="Resolve and validate Conjur client configuration",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"conjurconf {__version__}",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Override conjurrc location (default: $CONJURRC or ~/.conjurrc)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the resolved configuration",
        description="Print the configuration resolved from conjurrc files and environment.",
    )
    show_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    show_parser.set_defaults(func=cmd_show)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the resolved configuration",
        description="Check the resolved configuration and list every problem found.",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Create a conjurrc file",
        description="Write a conjurrc file from the given settings.",
    )
    init_parser.add_argument("--account", "-a", required=True, help="Conjur account")
    init_parser.add_argument("--url", "-u", required=True, help="Conjur appliance URL")
    init_parser.add_argument("--cert-file", metavar="PATH", help="CA certificate bundle")
    init_parser.add_argument("--netrc-path", metavar="PATH", help="netrc file location")
    init_parser.add_argument("--authn-type", metavar="TYPE", help="Authenticator type")
    init_parser.add_argument("--service-id", metavar="ID", help="Authenticator service ID")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing conjurrc",
    )
    init_parser.set_defaults(func=cmd_init)

    return parser


def setup_logging(verbose: int, quiet: bool) -> None:
    """Configure logging based on verbosity level."""
    if quiet:
        level = logging.WARNING
    elif verbose == 0:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if args.config else None


def cmd_show(args: argparse.Namespace) -> int:
    """Show the resolved configuration."""
    config = load_config(_config_path(args))

    if args.format == "json":
        data: dict[str, object] = dict(config_to_dict(config))
        data["https"] = config.is_https()
        output(json.dumps(data, indent=2), force=True)
    else:
        output(conjurrc(config).rstrip("\n"), force=True)

    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate the resolved configuration."""
    config = load_config(_config_path(args))

    errors = config_errors(config)
    if errors:
        output_error("Configuration is invalid:")
        for error in errors:
            output_error(f"  - {error}")
        return 2

    output("Configuration is valid.")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Create a conjurrc file."""
    path = _config_path(args) or get_config_path()

    if path.exists() and not args.force:
        output_error(f"Error: {path} already exists. Use --force to overwrite.")
        return 1

    config = Config(
        account=args.account,
        appliance_url=args.url,
        ssl_cert_path=args.cert_file or "",
        netrc_path=args.netrc_path or "",
        authn_type=args.authn_type or "",
        service_id=args.service_id or "",
    )
    config.validate()

    save_config(config, path)
    output(f"Wrote configuration to {path}")
    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the conjurconf CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set up logging and output mode
    setup_logging(args.verbose, args.quiet)
    set_output_mode(args.quiet)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        output("\nOperation cancelled.")
        sys.exit(130)
    except ConfigurationValidationError as e:
        output_error("Configuration is invalid:")
        for error in e.errors:
            output_error(f"  - {error}")
        sys.exit(2)
    except ConfigurationError as e:
        output_error(f"Configuration error: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
