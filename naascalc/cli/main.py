"""
cli/main.py - `naascalc` console entry point
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import sys

from naascalc import __version__
from naascalc.bootstrap.config import LoggingConfig
from naascalc.bootstrap.logging_setup import setup_logging
from .commands import build_registry
from .core import CLIContext, CommandRegistry, CommandResult, OutputFormat, format_output

logger = logging.getLogger("cli")


def build_parser(registry: CommandRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="naascalc",
        description="NaaS cost component dependency tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--format", "-f", choices=[f.value for f in OutputFormat],
                        default=OutputFormat.TEXT.value, help="Output format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name, command in registry.get_all().items():
        sub = subparsers.add_parser(name, aliases=command.aliases, help=command.description)
        command.configure_parser(sub)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    registry = build_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    log_config = LoggingConfig.from_env()
    setup_logging(
        level="DEBUG" if args.verbose else log_config.level,
        log_file=log_config.log_file,
        json_format=log_config.json_logs,
    )

    ctx = CLIContext(output_format=OutputFormat(args.format), verbose=args.verbose)
    command = registry.get(args.command)

    try:
        result = command.execute(ctx, args)
    except Exception as e:
        logger.exception(f"CLI error: {e}")
        result = CommandResult.failure(str(e))

    print(format_output(result, ctx.output_format))
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
