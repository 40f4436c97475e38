"""
Pattern Library - Known credential shapes and secret-bearing env var names.

Two immutable catalogues:
- BUILTIN_PATTERNS: named regular expressions for well-known API key and
  token formats. Order matters: when two patterns could match the same
  span, the earlier one wins and only its name is reported.
- SECRET_ENV_KEY_PATTERNS: matchers tested against environment variable
  *names* to decide whether a variable's value is a literal secret.

Every built-in expression keeps its quantifiers flat (no unbounded
repetition nested inside another unbounded repetition) so that scanning
stays linear in the length of the input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import ConfigurationError


__all__ = [
    "BUILTIN_PATTERNS",
    "SECRET_ENV_KEY_PATTERNS",
    "SecretPattern",
    "get_builtin_pattern",
]


@dataclass(frozen=True)
class SecretPattern:
    """
    A named matcher for one credential shape.

    The engine always substitutes every non-overlapping occurrence, so the
    expression never needs to be written with "match all" semantics in mind.

    Attributes:
        name: Stable identifier used for labels and reporting only.
        pattern: Compiled regular expression. A source string given to the
            constructor is compiled on construction.
    """

    name: str
    pattern: re.Pattern[str]

    def __post_init__(self) -> None:
        # Direct construction may pass a source string; compile it here
        if isinstance(self.pattern, re.Pattern):
            return
        if not isinstance(self.pattern, str):
            raise ConfigurationError(
                f"Pattern must be a string or compiled regex, got {type(self.pattern).__name__}",
                pattern_name=self.name,
            )
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise ConfigurationError(
                "Invalid regular expression", pattern_name=self.name, cause=e
            ) from e
        object.__setattr__(self, "pattern", compiled)

    @classmethod
    def compile(
        cls,
        name: str,
        pattern: str | re.Pattern[str],
        flags: int = 0,
    ) -> SecretPattern:
        """
        Build a SecretPattern from a regex source string or compiled pattern.

        Args:
            name: Pattern name used in labels.
            pattern: Regex source or an already compiled pattern.
            flags: ``re`` flags applied when compiling a source string.

        Returns:
            The compiled SecretPattern.

        Raises:
            ConfigurationError: If the source is not a valid regular expression.
        """
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern, flags)
            except re.error as e:
                raise ConfigurationError(
                    "Invalid regular expression", pattern_name=name, cause=e
                ) from e
        return cls(name=name, pattern=pattern)


# =============================================================================
# Built-in credential patterns
# =============================================================================

BUILTIN_PATTERNS: tuple[SecretPattern, ...] = (
    # Anthropic must precede the generic sk- shape used by OpenAI
    SecretPattern.compile("anthropic_api_key", r"sk-ant-[a-zA-Z0-9_-]{20,}"),
    SecretPattern.compile("openai_api_key", r"sk-[a-zA-Z0-9]{20,}"),
    # GitHub
    SecretPattern.compile("github_pat", r"ghp_[a-zA-Z0-9]{36}"),
    SecretPattern.compile("github_pat_fine", r"github_pat_[a-zA-Z0-9_]{22,}"),
    SecretPattern.compile("github_oauth", r"gho_[a-zA-Z0-9]{36}"),
    # AWS
    SecretPattern.compile("aws_access_key", r"AKIA[A-Z0-9]{16}"),
    SecretPattern.compile(
        "aws_secret_key",
        r"(?:aws_secret_access_key|AWS_SECRET_ACCESS_KEY)['\"=:\s]+([A-Za-z0-9/+=]{40})",
    ),
    # Slack
    SecretPattern.compile("slack_token", r"xox[bpaors]-[a-zA-Z0-9-]{10,}"),
    # Stripe secret and restricted keys
    SecretPattern.compile("stripe_key", r"[sr]k_(?:live|test)_[a-zA-Z0-9]{20,}"),
    # Google
    SecretPattern.compile("google_api_key", r"AIza[a-zA-Z0-9_-]{35}"),
    # JWT: three dot-separated base64url sections
    SecretPattern.compile(
        "jwt",
        r"eyJ[a-zA-Z0-9_-]{10,}\.eyJ[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]{10,}",
    ),
    # Quoted values assigned to secret-ish keywords
    SecretPattern.compile(
        "generic_secret",
        r"(?:api_key|apikey|secret|token|password|credential|auth)['\"]?\s*[:=]\s*['\"]"
        r"([a-zA-Z0-9_\-/+=]{16,})['\"]",
    ),
)


# =============================================================================
# Environment variable names that likely hold secrets
# =============================================================================

SECRET_ENV_KEY_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(source, re.IGNORECASE)
    for source in (
        r"_KEY$",
        r"_TOKEN$",
        r"_SECRET$",
        r"_PASSWORD$",
        r"_CREDENTIAL$",
        r"_API_KEY$",
        r"^API_KEY$",
        r"^SECRET$",
        r"^TOKEN$",
        r"^PASSWORD$",
        r"^AUTH",
        r"_AUTH$",
    )
)


def get_builtin_pattern(name: str) -> SecretPattern:
    """
    Look up a built-in pattern by name.

    Raises:
        KeyError: If no built-in pattern has that name.
    """
    for secret_pattern in BUILTIN_PATTERNS:
        if secret_pattern.name == name:
            return secret_pattern
    raise KeyError(name)
