"""
CLI Application - Redact secrets from files or stdin.

Usage:
    agentseenoevil [OPTIONS] [FILE ...]

Reads each FILE (or stdin when none is given) line by line, redacts every
line and writes it to stdout. Diagnostics go to stderr so the output can be
piped straight into an agent.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from agentseenoevil import __version__
from agentseenoevil.adapters.config_file import load_config_file
from agentseenoevil.core.exceptions import ConfigurationError
from agentseenoevil.core.patterns import SecretPattern
from agentseenoevil.core.redactor import Redactor, RedactorOptions
from agentseenoevil.core.stream import RedactionStream

from .exit_codes import ExitCode
from .logging import RedactingFilter, setup_logging


__all__ = [
    "build_options",
    "create_parser",
    "main",
    "run",
]

logger = logging.getLogger("agentseenoevil")


def create_parser() -> argparse.ArgumentParser:
    """
    Create the command-line argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="agentseenoevil",
        description="Redact API keys, tokens and other secrets from text before an agent reads it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Redact a log file
  agentseenoevil build.log > build.clean.log

  # Filter a command's output, also hiding secret env var values
  some-command 2>&1 | agentseenoevil --scan-env --label

  # Add a custom pattern
  agentseenoevil --pattern internal_token='itk_[a-z0-9]{24}' notes.txt

  # Fail (exit 3) if a file contains secrets
  agentseenoevil --check config.env
        """,
    )

    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Files to redact (default: read stdin)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    config_group = parser.add_argument_group("Detection")
    config_group.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to a YAML or TOML config file",
    )
    config_group.add_argument(
        "--no-builtins",
        action="store_true",
        help="Disable the built-in pattern catalogue",
    )
    config_group.add_argument(
        "--pattern",
        "-p",
        action="append",
        default=[],
        metavar="NAME=REGEX",
        help="Add a custom pattern (repeatable)",
    )
    config_group.add_argument(
        "--scan-env",
        action="store_true",
        help="Redact values of secret-looking environment variables",
    )
    config_group.add_argument(
        "--env-key",
        action="append",
        default=[],
        metavar="REGEX",
        help="Extra env var name pattern treated as secret (repeatable)",
    )
    config_group.add_argument(
        "--min-env-length",
        type=int,
        metavar="N",
        help="Minimum env value length eligible for redaction (default: 8)",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--replacement",
        type=str,
        help="Replacement text (default: [REDACTED])",
    )
    output_group.add_argument(
        "--label",
        action="store_true",
        help="Replace with labels naming the source, e.g. [REDACTED:github_pat]",
    )
    output_group.add_argument(
        "--check",
        action="store_true",
        help="Only detect: print nothing and exit 3 if any secret is found",
    )
    output_group.add_argument(
        "--report",
        action="store_true",
        help="Print a JSON summary of redactions to stderr",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose logging",
    )
    output_group.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log output format (default: text)",
    )

    return parser


def _parse_pattern_arg(value: str) -> SecretPattern:
    name, sep, source = value.partition("=")
    if not sep or not name:
        raise ConfigurationError(f"Expected NAME=REGEX, got '{value}'")
    return SecretPattern.compile(name, source)


def build_options(args: argparse.Namespace) -> RedactorOptions:
    """
    Merge config file options with command-line flags.

    Flags take precedence; repeatable flags extend what the file provides.

    Raises:
        ConfigurationError: On invalid config files or patterns.
    """
    options = load_config_file(args.config) if args.config else RedactorOptions()

    overrides: dict = {}
    if args.no_builtins:
        overrides["builtins"] = False
    if args.pattern:
        overrides["patterns"] = (
            *options.patterns,
            *(_parse_pattern_arg(value) for value in args.pattern),
        )
    if args.scan_env:
        overrides["scan_env"] = True
    if args.env_key:
        overrides["env_key_patterns"] = (*options.env_key_patterns, *args.env_key)
    if args.min_env_length is not None:
        if args.min_env_length < 1:
            raise ConfigurationError("--min-env-length must be at least 1")
        overrides["min_env_value_length"] = args.min_env_length
    if args.replacement is not None:
        overrides["replacement"] = args.replacement
    if args.label:
        overrides["label_redactions"] = True

    return replace(options, **overrides)


def _redact_sources(
    stream: RedactionStream,
    files: list[str],
    stdin: TextIO,
    sink: TextIO,
) -> ExitCode:
    for name in files:
        path = Path(name)
        if not path.is_file():
            logger.error("File not found: %s", name)
            return ExitCode.FILE_NOT_FOUND
        with path.open(encoding="utf-8", errors="replace", newline="") as source:
            found = stream.pipe(source, sink)
        logger.debug("%s: %d redaction(s)", name, found)

    if not files:
        stream.pipe(stdin, sink)

    return ExitCode.SUCCESS


class _NullSink:
    def write(self, text: str) -> int:
        return len(text)

    def flush(self) -> None:
        pass


def run(
    args: argparse.Namespace,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """
    Run the redactor with parsed arguments.

    Returns:
        Process exit code.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    handler = setup_logging(level=log_level, log_format=args.log_format, stream=stderr)

    try:
        redactor = Redactor(build_options(args))
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return ExitCode.CONFIG_ERROR

    handler.addFilter(RedactingFilter(redactor))
    stream = redactor.create_stream()
    sink = _NullSink() if args.check else stdout

    try:
        code = _redact_sources(stream, args.files, stdin, sink)
    except OSError as e:
        logger.error("I/O error: %s", e)
        return ExitCode.ERROR

    if args.report:
        report = {"chunks": stream.chunks, "count": stream.redactions, "matched": stream.matched}
        print(json.dumps(report), file=stderr)

    if code != ExitCode.SUCCESS:
        return code
    if args.check and stream.redactions:
        return ExitCode.SECRETS_FOUND
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry point for the agentseenoevil command."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
