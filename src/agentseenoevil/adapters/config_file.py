"""
Config File Loader - Build RedactorOptions from YAML or TOML files.

Supported formats:
- YAML (.yaml, .yml)
- TOML (.toml), including a ``[tool.agentseenoevil]`` table in pyproject.toml

Example YAML:

```yaml
builtins: true
scan_env: true
env_key_patterns:
  - "^INTERNAL_"
min_env_value_length: 10
label_redactions: true
patterns:
  - name: internal_token
    pattern: "itk_[a-z0-9]{24}"
  - name: session_cookie
    pattern: "session=[a-f0-9]{32}"
    flags: [IGNORECASE]
```
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml


try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for older Python

from ..core.exceptions import ConfigFileError, ConfigurationError
from ..core.patterns import SecretPattern
from ..core.redactor import RedactorOptions


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "load_config_file",
    "options_from_dict",
]

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".yaml", ".yml", ".toml")

_SECTION = "agentseenoevil"

_BOOL_FIELDS = ("builtins", "scan_env", "label_redactions")


def load_config_file(path: str | Path) -> RedactorOptions:
    """
    Load redactor options from a configuration file.

    Args:
        path: Path to a YAML or TOML file.

    Returns:
        RedactorOptions populated from the file.

    Raises:
        ConfigFileError: If the file is missing, unparsable or invalid.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in SUPPORTED_EXTENSIONS:
        raise ConfigFileError(
            f"Unsupported config format '{suffix}' (expected one of {', '.join(SUPPORTED_EXTENSIONS)})",
            config_path=str(path),
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError("Cannot read config file", config_path=str(path), cause=e) from e

    try:
        if suffix == ".toml":
            data = tomllib.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError("Cannot parse config file", config_path=str(path), cause=e) from e

    try:
        options = options_from_dict(_unwrap(data))
    except ConfigurationError as e:
        if isinstance(e, ConfigFileError) and e.config_path:
            raise
        raise ConfigFileError(e.message, config_path=str(path), cause=e.cause) from e

    logger.debug("Loaded config from %s (%d custom pattern(s))", path, len(options.patterns))
    return options


def _unwrap(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError("Config root must be a mapping")
    if isinstance(data.get("tool"), dict) and _SECTION in data["tool"]:
        data = data["tool"][_SECTION]
    elif _SECTION in data:
        data = data[_SECTION]
    elif isinstance(data.get("tool"), dict):
        raise ConfigFileError(f"No [tool.{_SECTION}] section found")
    if not isinstance(data, dict):
        raise ConfigFileError(f"'{_SECTION}' section must be a mapping")
    return data


def options_from_dict(data: dict[str, Any]) -> RedactorOptions:
    """
    Validate a plain mapping and convert it to RedactorOptions.

    Raises:
        ConfigFileError: On unknown keys or values of the wrong type.
        ConfigurationError: If a pattern does not compile.
    """
    known = set(RedactorOptions.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigFileError(f"Unknown config key(s): {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}

    for key in _BOOL_FIELDS:
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigFileError(f"'{key}' must be true or false")
            kwargs[key] = data[key]

    if "min_env_value_length" in data:
        value = data["min_env_value_length"]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigFileError("'min_env_value_length' must be a positive integer")
        kwargs["min_env_value_length"] = value

    if "replacement" in data:
        if not isinstance(data["replacement"], str):
            raise ConfigFileError("'replacement' must be a string")
        kwargs["replacement"] = data["replacement"]

    if "env_key_patterns" in data:
        env_keys = data["env_key_patterns"]
        if not isinstance(env_keys, list) or not all(isinstance(k, str) for k in env_keys):
            raise ConfigFileError("'env_key_patterns' must be a list of strings")
        kwargs["env_key_patterns"] = tuple(env_keys)

    if "patterns" in data:
        entries = data["patterns"]
        if not isinstance(entries, list):
            raise ConfigFileError("'patterns' must be a list")
        kwargs["patterns"] = tuple(_parse_pattern(entry) for entry in entries)

    return RedactorOptions(**kwargs)


def _parse_pattern(entry: Any) -> SecretPattern:
    if not isinstance(entry, dict):
        raise ConfigFileError("Each pattern must be a mapping with 'name' and 'pattern'")

    name = entry.get("name")
    source = entry.get("pattern")
    if not isinstance(name, str) or not name:
        raise ConfigFileError("Pattern entry is missing a 'name'")
    if not isinstance(source, str):
        raise ConfigFileError(f"Pattern '{name}' is missing a 'pattern' string")

    flag_names = entry.get("flags", [])
    if not isinstance(flag_names, list):
        raise ConfigFileError(f"Flags for pattern '{name}' must be a list")

    flags = 0
    for flag_name in flag_names:
        try:
            flags |= re.RegexFlag[str(flag_name).upper()]
        except KeyError as e:
            raise ConfigFileError(f"Unknown regex flag '{flag_name}' for pattern '{name}'") from e

    return SecretPattern.compile(name, source, flags)
