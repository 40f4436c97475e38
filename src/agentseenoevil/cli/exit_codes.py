"""
Exit codes for the agentseenoevil command.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    SECRETS_FOUND = 3  # Only with --check
    FILE_NOT_FOUND = 4
