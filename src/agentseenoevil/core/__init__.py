"""
Core - Redaction engine, pattern library and errors.

Pure logic with no I/O beyond a one-time, explicit environment read.
"""

from .environment import compile_env_key_matchers, is_secret_env_key, scan_environment
from .exceptions import AgentSeeNoEvilError, ConfigFileError, ConfigurationError
from .patterns import (
    BUILTIN_PATTERNS,
    SECRET_ENV_KEY_PATTERNS,
    SecretPattern,
    get_builtin_pattern,
)
from .redactor import (
    DEFAULT_MIN_ENV_VALUE_LENGTH,
    DEFAULT_REPLACEMENT,
    EngineConfig,
    RedactorOptions,
    RedactResult,
    Redactor,
    create_redactor,
)
from .stream import RedactionStream


__all__ = [
    # Patterns
    "BUILTIN_PATTERNS",
    "SECRET_ENV_KEY_PATTERNS",
    "SecretPattern",
    "get_builtin_pattern",
    # Environment
    "compile_env_key_matchers",
    "is_secret_env_key",
    "scan_environment",
    # Engine
    "DEFAULT_MIN_ENV_VALUE_LENGTH",
    "DEFAULT_REPLACEMENT",
    "EngineConfig",
    "RedactResult",
    "RedactionStream",
    "Redactor",
    "RedactorOptions",
    "create_redactor",
    # Errors
    "AgentSeeNoEvilError",
    "ConfigFileError",
    "ConfigurationError",
]
