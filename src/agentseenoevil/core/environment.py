"""
Environment scanning - Collect secret values from an environment snapshot.

The scan is an explicit, one-shot read of a mapping. The redactor calls it
once at construction time with either ``os.environ`` or an injected mapping,
and freezes the result; nothing here is consulted again per call.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from .exceptions import ConfigurationError
from .patterns import SECRET_ENV_KEY_PATTERNS


__all__ = [
    "compile_env_key_matchers",
    "is_secret_env_key",
    "scan_environment",
]

logger = logging.getLogger(__name__)


def compile_env_key_matchers(
    extra: Iterable[str | re.Pattern[str]] = (),
) -> tuple[re.Pattern[str], ...]:
    """
    Merge the default env key matchers with caller-supplied ones.

    String matchers are compiled case-insensitively, like the defaults.
    Compiled patterns are used as given.

    Raises:
        ConfigurationError: If a string matcher is not a valid regex.
    """
    matchers = list(SECRET_ENV_KEY_PATTERNS)
    for matcher in extra:
        if isinstance(matcher, re.Pattern):
            matchers.append(matcher)
            continue
        try:
            matchers.append(re.compile(matcher, re.IGNORECASE))
        except re.error as e:
            raise ConfigurationError(
                "Invalid environment key pattern", pattern_name=str(matcher), cause=e
            ) from e
    return tuple(matchers)


def is_secret_env_key(key: str, matchers: Iterable[re.Pattern[str]]) -> bool:
    """Check whether an environment variable name looks secret-bearing."""
    return any(matcher.search(key) for matcher in matchers)


def scan_environment(
    environ: Mapping[str, str],
    key_matchers: Iterable[re.Pattern[str]],
    min_value_length: int,
) -> dict[str, str]:
    """
    Collect literal secret values from an environment mapping.

    Args:
        environ: Snapshot of environment variables (name -> value).
        key_matchers: Matchers tested against variable names.
        min_value_length: Values shorter than this are ignored.

    Returns:
        Mapping of secret value -> originating variable name. When two
        variables hold the same value the last one seen wins.
    """
    matchers = tuple(key_matchers)
    literals: dict[str, str] = {}

    for key, value in environ.items():
        if not value or len(value) < min_value_length:
            continue
        if is_secret_env_key(key, matchers):
            literals[value] = key

    logger.debug("Collected %d secret value(s) from environment", len(literals))
    return literals
