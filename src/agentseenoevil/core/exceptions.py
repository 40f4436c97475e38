"""
Exception hierarchy for agentseenoevil.

All errors raised by the package derive from AgentSeeNoEvilError so callers
can catch everything with a single except clause. The redaction engine itself
only ever raises ConfigurationError, and only while it is being constructed:
redact(), clean(), has_secrets() and the stream adapter never fail on text.

Hierarchy:
    AgentSeeNoEvilError
    └── ConfigurationError
        └── ConfigFileError
"""

from __future__ import annotations


__all__ = [
    "AgentSeeNoEvilError",
    "ConfigFileError",
    "ConfigurationError",
]


class AgentSeeNoEvilError(Exception):
    """
    Base exception for all agentseenoevil errors.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception, if this error wraps one.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(AgentSeeNoEvilError):
    """
    Raised when a redactor is built from an invalid configuration.

    The typical case is a custom pattern whose regular expression does not
    compile. The offending pattern's name is kept on ``pattern_name`` (its
    source is deliberately not, since it may itself embed a secret).
    """

    def __init__(
        self,
        message: str,
        *,
        pattern_name: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.pattern_name = pattern_name
        if pattern_name:
            message = f"{message} [pattern: {pattern_name}]"
        super().__init__(message, cause=cause)


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file is missing, unreadable or malformed."""

    def __init__(
        self,
        message: str,
        *,
        config_path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.config_path = config_path
        if config_path:
            message = f"{message} (in {config_path})"
        super().__init__(message, cause=cause)
