"""
Redactor - Detect and replace secrets in text.

Provides:
- RedactorOptions: Construction inputs
- EngineConfig: Frozen configuration built once per redactor
- RedactResult: Outcome of a single redaction pass
- Redactor: The engine (redact, clean, has_secrets, create_stream)

Redaction runs in two sequential layers over a single accumulator:

1. Pattern layer - each SecretPattern, in configured order, replaces all of
   its non-overlapping matches. Later patterns only see text already
   rewritten by earlier ones, so a span is redacted (and reported) once.
2. Environment layer - literal values collected from the environment at
   construction time, longest first, so a value that is a substring of a
   longer one never leaves a fragment of the longer one behind.

Example:
    >>> redactor = Redactor(label_redactions=True)
    >>> redactor.clean("key: sk-ant-REDACTED")
    'key: [REDACTED:anthropic_api_key]'
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .environment import compile_env_key_matchers, scan_environment
from .exceptions import ConfigurationError
from .patterns import BUILTIN_PATTERNS, SecretPattern


if TYPE_CHECKING:
    from .stream import RedactionStream


__all__ = [
    "DEFAULT_MIN_ENV_VALUE_LENGTH",
    "DEFAULT_REPLACEMENT",
    "EngineConfig",
    "RedactResult",
    "Redactor",
    "RedactorOptions",
    "create_redactor",
]

logger = logging.getLogger(__name__)

DEFAULT_REPLACEMENT = "[REDACTED]"
DEFAULT_MIN_ENV_VALUE_LENGTH = 8

PatternSpec = SecretPattern | tuple[str, str | re.Pattern[str]]


@dataclass
class RedactorOptions:
    """Inputs used to build a Redactor."""

    builtins: bool = True  # Include BUILTIN_PATTERNS ahead of custom ones
    patterns: Sequence[PatternSpec] = ()
    scan_env: bool = False  # Snapshot the environment at construction
    env_key_patterns: Sequence[str | re.Pattern[str]] = ()
    min_env_value_length: int = DEFAULT_MIN_ENV_VALUE_LENGTH
    replacement: str = DEFAULT_REPLACEMENT
    label_redactions: bool = False  # Emit [REDACTED:<name>] instead of replacement


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration frozen at construction time.

    Attributes:
        patterns: Built-in patterns (if enabled) followed by custom ones.
        env_literals: Read-only mapping of secret value -> env var name.
        min_env_value_length: Shortest env value eligible for redaction.
        replacement: Token substituted when labels are off.
        label_redactions: Whether replacements name their source.
    """

    patterns: tuple[SecretPattern, ...] = ()
    env_literals: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    min_env_value_length: int = DEFAULT_MIN_ENV_VALUE_LENGTH
    replacement: str = DEFAULT_REPLACEMENT
    label_redactions: bool = False


@dataclass(frozen=True)
class RedactResult:
    """
    Result of redacting one piece of text.

    Attributes:
        text: The redacted text.
        count: Total number of replacements across both layers.
        matched: Distinct pattern names and ``env:<NAME>`` labels, in the
            order they were first hit.
    """

    text: str
    count: int = 0
    matched: tuple[str, ...] = ()

    @property
    def redacted(self) -> bool:
        """True if anything was replaced."""
        return self.count > 0

    def to_dict(self) -> dict[str, Any]:
        """Summary without the text, safe for reports."""
        return {"count": self.count, "matched": list(self.matched)}


def _coerce_pattern(spec: PatternSpec) -> SecretPattern:
    if isinstance(spec, SecretPattern):
        return spec
    try:
        name, pattern = spec
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Custom patterns must be SecretPattern or (name, regex) pairs, got {type(spec).__name__}",
            cause=e,
        ) from e
    return SecretPattern.compile(name, pattern)


def _literal(replacement: str) -> Callable[[re.Match[str]], str]:
    # Callable replacement so backslashes in the token are never expanded
    return lambda _match: replacement


class Redactor:
    """
    Secret detection and redaction engine.

    The configuration is built once in ``__init__`` and never mutated, so a
    single instance can be shared freely, including across threads.
    """

    def __init__(
        self,
        options: RedactorOptions | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> None:
        """
        Build the redactor.

        Args:
            options: Construction options. Defaults to RedactorOptions().
            environ: Environment snapshot to scan instead of os.environ.
                Only read when ``scan_env`` is enabled.
            **overrides: Individual RedactorOptions fields, applied on top
                of ``options``.

        Raises:
            ConfigurationError: If a custom pattern or env key pattern is invalid.
        """
        options = options or RedactorOptions()
        if overrides:
            options = replace(options, **overrides)

        patterns: list[SecretPattern] = []
        if options.builtins:
            patterns.extend(BUILTIN_PATTERNS)
        patterns.extend(_coerce_pattern(spec) for spec in options.patterns)

        min_length = options.min_env_value_length or 0
        if min_length < 1:
            min_length = DEFAULT_MIN_ENV_VALUE_LENGTH

        env_literals: dict[str, str] = {}
        if options.scan_env:
            key_matchers = compile_env_key_matchers(options.env_key_patterns)
            snapshot = dict(os.environ if environ is None else environ)
            env_literals = scan_environment(snapshot, key_matchers, min_length)

        self._config = EngineConfig(
            patterns=tuple(patterns),
            env_literals=MappingProxyType(env_literals),
            min_env_value_length=min_length,
            replacement=options.replacement or DEFAULT_REPLACEMENT,
            label_redactions=options.label_redactions,
        )

        # Longest first; sorted() is stable so equal lengths keep scan order
        self._env_matchers: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
            (name, re.compile(re.escape(value)))
            for value, name in sorted(
                env_literals.items(), key=lambda item: len(item[0]), reverse=True
            )
        )

        logger.debug(
            "Redactor ready: %d pattern(s), %d environment value(s)",
            len(self._config.patterns),
            len(self._env_matchers),
        )

    @property
    def config(self) -> EngineConfig:
        """The frozen engine configuration."""
        return self._config

    def _replacement_for(self, label: str) -> str:
        if self._config.label_redactions:
            return f"[REDACTED:{label}]"
        return self._config.replacement

    def redact(self, text: str) -> RedactResult:
        """
        Redact secrets from text.

        Args:
            text: Input text. Empty and whitespace-only input is returned as-is.

        Returns:
            RedactResult with the cleaned text, replacement count and labels.
        """
        count = 0
        matched: list[str] = []

        for secret_pattern in self._config.patterns:
            replacement = self._replacement_for(secret_pattern.name)
            text, hits = secret_pattern.pattern.subn(_literal(replacement), text)
            if hits:
                count += hits
                if secret_pattern.name not in matched:
                    matched.append(secret_pattern.name)

        for env_name, matcher in self._env_matchers:
            label = f"env:{env_name}"
            text, hits = matcher.subn(_literal(self._replacement_for(label)), text)
            if hits:
                count += hits
                if label not in matched:
                    matched.append(label)

        return RedactResult(text=text, count=count, matched=tuple(matched))

    def clean(self, text: str) -> str:
        """Redact and return only the cleaned text."""
        return self.redact(text).text

    def has_secrets(self, text: str) -> bool:
        """
        Check whether text contains any detectable secret.

        This runs a full redaction pass; there is no cheaper detect-only path.
        """
        return self.redact(text).count > 0

    def create_stream(self, encoding: str = "utf-8") -> RedactionStream:
        """
        Create a streaming adapter that redacts each chunk independently.

        Secrets split across two chunks are not detected.
        """
        from .stream import RedactionStream

        return RedactionStream(self, encoding=encoding)


def create_redactor(
    *,
    environ: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> Redactor:
    """
    Factory function for creating a Redactor.

    Args:
        environ: Optional environment snapshot used when ``scan_env`` is set.
        **kwargs: RedactorOptions fields.

    Returns:
        Configured Redactor.
    """
    return Redactor(RedactorOptions(**kwargs), environ=environ)
