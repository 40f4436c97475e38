"""
Tests for the built-in pattern library.

Tests cover:
- Catalogue shape and immutability
- Canonical example coverage for every built-in pattern
- Env key name matchers
- SecretPattern construction
"""

import re
import time

import pytest

from agentseenoevil.core.exceptions import ConfigurationError
from agentseenoevil.core.patterns import (
    BUILTIN_PATTERNS,
    SECRET_ENV_KEY_PATTERNS,
    SecretPattern,
    get_builtin_pattern,
)


class TestCatalogue:
    """Tests for the catalogue structure."""

    def test_builtin_patterns_non_empty(self) -> None:
        """Should ship at least one built-in pattern."""
        assert isinstance(BUILTIN_PATTERNS, tuple)
        assert len(BUILTIN_PATTERNS) > 0

    def test_each_pattern_has_name_and_regex(self) -> None:
        """Every entry should pair a name with a compiled regex."""
        for secret_pattern in BUILTIN_PATTERNS:
            assert isinstance(secret_pattern.name, str)
            assert secret_pattern.name
            assert isinstance(secret_pattern.pattern, re.Pattern)

    def test_names_are_unique(self) -> None:
        """Pattern names should be unique."""
        names = [p.name for p in BUILTIN_PATTERNS]
        assert len(names) == len(set(names))

    def test_anthropic_precedes_openai(self) -> None:
        """The more specific sk-ant- shape must run before the generic sk- one."""
        names = [p.name for p in BUILTIN_PATTERNS]
        assert names.index("anthropic_api_key") < names.index("openai_api_key")

    def test_secret_pattern_is_frozen(self) -> None:
        """SecretPattern instances should be immutable."""
        with pytest.raises(AttributeError):
            BUILTIN_PATTERNS[0].name = "changed"  # type: ignore[misc]

    def test_env_key_patterns_non_empty(self) -> None:
        """Should ship default env key matchers."""
        assert len(SECRET_ENV_KEY_PATTERNS) > 0


class TestCanonicalCoverage:
    """Each built-in pattern should catch a real-world-shaped example."""

    def test_every_builtin_has_an_example(self, canonical_secrets: dict[str, str]) -> None:
        """The sample table should cover every shipped pattern."""
        assert {p.name for p in BUILTIN_PATTERNS} == set(canonical_secrets)

    @pytest.mark.parametrize("name", [p.name for p in BUILTIN_PATTERNS])
    def test_pattern_matches_example(self, name: str, canonical_secrets: dict[str, str]) -> None:
        """The named pattern should find its canonical example."""
        assert get_builtin_pattern(name).pattern.search(canonical_secrets[name])

    @pytest.mark.parametrize("name", [p.name for p in BUILTIN_PATTERNS])
    def test_pattern_ignores_plain_english(self, name: str) -> None:
        """No pattern should match an ordinary sentence."""
        sentence = "Hello world, this is a normal message with no secrets."
        assert get_builtin_pattern(name).pattern.search(sentence) is None

    def test_github_pat_requires_full_length(self) -> None:
        """A too-short ghp_ string should not match."""
        assert get_builtin_pattern("github_pat").pattern.search("ghp_short") is None

    def test_aws_access_key_requires_uppercase(self) -> None:
        """AKIA keys are upper-case alphanumerics."""
        assert get_builtin_pattern("aws_access_key").pattern.search("AKIAiosfodnn7example") is None

    def test_patterns_scan_adversarial_input_quickly(self) -> None:
        """Long near-miss input should not trigger catastrophic backtracking."""
        adversarial = "sk-" + "a" * 5000 + "!" + "eyJ" + "a" * 5000 + "." * 10 + "api_key='" + "a" * 5000
        start = time.perf_counter()
        for secret_pattern in BUILTIN_PATTERNS:
            secret_pattern.pattern.findall(adversarial)
        assert time.perf_counter() - start < 2.0


class TestEnvKeyPatterns:
    """Tests for environment variable name matchers."""

    @pytest.mark.parametrize(
        "key",
        [
            "OPENAI_API_KEY",
            "GITHUB_TOKEN",
            "CLIENT_SECRET",
            "DB_PASSWORD",
            "SERVICE_CREDENTIAL",
            "API_KEY",
            "TOKEN",
            "AUTHORIZATION",
            "PROXY_AUTH",
            "github_token",
        ],
    )
    def test_secret_names_match(self, key: str) -> None:
        """Secret-looking names should match at least one default matcher."""
        assert any(p.search(key) for p in SECRET_ENV_KEY_PATTERNS)

    @pytest.mark.parametrize("key", ["HOME", "PATH", "SHELL", "KEYBOARD_LAYOUT", "TOKENIZER_PATH"])
    def test_ordinary_names_do_not_match(self, key: str) -> None:
        """Ordinary names should not match."""
        assert not any(p.search(key) for p in SECRET_ENV_KEY_PATTERNS)


class TestSecretPatternCompile:
    """Tests for SecretPattern.compile."""

    def test_compile_from_string(self) -> None:
        """Should compile a regex source string."""
        secret_pattern = SecretPattern.compile("demo", r"demo_[0-9]+")
        assert secret_pattern.name == "demo"
        assert secret_pattern.pattern.search("x demo_123 y")

    def test_compile_with_flags(self) -> None:
        """Should honour regex flags."""
        secret_pattern = SecretPattern.compile("demo", r"demo", re.IGNORECASE)
        assert secret_pattern.pattern.search("DEMO")

    def test_compile_accepts_compiled_pattern(self) -> None:
        """Should keep an already compiled pattern as-is."""
        compiled = re.compile(r"abc")
        assert SecretPattern.compile("abc", compiled).pattern is compiled

    def test_invalid_regex_raises(self) -> None:
        """Should raise ConfigurationError for invalid regex source."""
        with pytest.raises(ConfigurationError) as exc_info:
            SecretPattern.compile("broken", "[unclosed")
        assert exc_info.value.pattern_name == "broken"
        assert isinstance(exc_info.value.cause, re.error)

    def test_non_string_raises(self) -> None:
        """Should reject values that are neither str nor compiled regex."""
        with pytest.raises(ConfigurationError):
            SecretPattern.compile("number", 42)  # type: ignore[arg-type]

    def test_constructor_compiles_source_string(self) -> None:
        """Direct construction compiles a source string."""
        secret_pattern = SecretPattern(name="demo", pattern=r"demo_[0-9]+")  # type: ignore[arg-type]
        assert isinstance(secret_pattern.pattern, re.Pattern)
        assert secret_pattern.pattern.search("demo_7")

    def test_constructor_rejects_invalid_source(self) -> None:
        """Direct construction raises ConfigurationError for invalid regex source."""
        with pytest.raises(ConfigurationError) as exc_info:
            SecretPattern(name="broken", pattern="[unclosed")  # type: ignore[arg-type]
        assert exc_info.value.pattern_name == "broken"

    def test_get_builtin_pattern_unknown(self) -> None:
        """Unknown names should raise KeyError."""
        with pytest.raises(KeyError):
            get_builtin_pattern("does_not_exist")
