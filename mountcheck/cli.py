"""Command-line interface for the mount state check."""

import argparse
import sys
from pathlib import Path

from mountcheck import __version__
from mountcheck.checks import run_check
from mountcheck.core.config import CheckConfig, ConfigError, load_config
from mountcheck.core.context import Context
from mountcheck.core.logging import ScriptLogger, get_log_path
from mountcheck.core.output import Output, unknown
from mountcheck.core.runner import CheckRun


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="check_mounts",
        description="Verify local filesystems are mounted and NFS mounts respond",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mountcheck {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file (overrides system and user config)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        dest="nfs_timeout",
        help="Seconds to wait for each NFS probe (default: 5)",
    )
    parser.add_argument(
        "--platform",
        choices=["aix", "linux"],
        help="Inventory backend (default: detected)",
    )
    parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write a JSON line log of the run to stderr",
    )
    return parser


def create_logger(config: CheckConfig, verbose: bool) -> ScriptLogger:
    """Logger writing to the configured log dir and, if verbose, stderr."""
    log_path = None
    if config.log_dir:
        log_path = get_log_path(config.check_name, Path(config.log_dir))
    return ScriptLogger(
        config.check_name,
        log_path=log_path,
        stream=sys.stderr if verbose else None,
        min_level="debug" if verbose else config.log_level,
    )


def main(argv: list[str] | None = None, context: Context | None = None) -> int:
    """Main entry point. Prints one status line; returns the exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)
    context = context or Context()

    try:
        config = load_config(
            context,
            path=args.config,
            overrides={"nfs_timeout": args.nfs_timeout, "platform": args.platform},
        ).resolved(context)
    except ConfigError as e:
        output = Output(CheckConfig.check_name)
        output.set_verdict(unknown(f"invalid configuration: {e}"))
        output.render(args.format)
        return output.exit_code

    output = Output(config.check_name)
    try:
        with create_logger(config, args.verbose) as logger:
            run = CheckRun(config=config, context=context, logger=logger, output=output)
            logger.info("check started", platform=config.platform, timeout=config.nfs_timeout)
            verdict = run_check(run)
            logger.info("check finished", severity=verdict.severity.name, detail=verdict.message)
    except Exception as e:
        # The monitoring side still needs exactly one status line
        verdict = unknown(f"unexpected error: {e}")

    output.set_verdict(verdict)
    output.render(args.format)
    return output.exit_code


if __name__ == "__main__":
    sys.exit(main())
