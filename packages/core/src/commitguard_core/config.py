"""Run configuration, assembled once and passed to every component.

load_config is the only place that reads the environment. It merges, in
order of precedence:
  1. CLI overrides
  2. environment variables
  3. .commitguard.yml in the current directory
  4. built-in defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

import httpx
import yaml

from commitguard_core.errors import ConfigurationError
from commitguard_core.providers.ollama import DEFAULT_LOCAL_ENDPOINT, OllamaBackend
from commitguard_core.providers.registry import (
    AUTO_DETECT_ORDER,
    BACKENDS,
    GENERIC_CREDENTIAL_ENV,
    canonical_name,
)

logger = logging.getLogger(__name__)

TIMEOUT_MS_DEFAULT = 30_000
TIMEOUT_MS_MIN = 5_000
TIMEOUT_MS_MAX = 120_000

MAX_FILE_SIZE_DEFAULT = 50_000
MAX_FILE_SIZE_MIN = 1_000
MAX_FILE_SIZE_MAX = 1_000_000

FALLBACK_BACKEND = "openai"
PROBE_TIMEOUT_SECONDS = 1.0

DEFAULT_CONFIG: dict = {
    "backend": None,  # None = auto-detect from available credentials
    "model": None,  # None = the backend's default model
    "timeout_ms": TIMEOUT_MS_DEFAULT,
    "max_file_size": MAX_FILE_SIZE_DEFAULT,
    "rules": ".code-rules.md",
    "ignore_file": ".commitguard-ignore",
    "exclude": [],  # extra ignore patterns on top of the ignore file
    "cache": "file",  # file | sqlite | none
    "cache_dir": ".commitguard-cache",
    "local_endpoint": DEFAULT_LOCAL_ENDPOINT,
}

DEFAULT_RULES = """# Universal Code Review Rules

## Code Quality & Maintainability
- Use meaningful and descriptive names for variables, functions, and classes
- Keep functions focused and concise (prefer under 20-30 lines)
- Avoid magic numbers and magic strings - use named constants or configuration
- Remove unused variables, imports, and dead code
- Add appropriate comments for complex logic and business rules

## Best Practices
- Follow consistent naming conventions for your language/framework
- Handle errors appropriately - don't ignore or suppress them silently
- Validate inputs and handle edge cases
- Use proper logging instead of debug print statements
- Follow the DRY principle - avoid code duplication

## Security & Safety
- Never commit sensitive data (passwords, API keys, tokens, credentials)
- Validate and sanitize all user inputs
- Don't hardcode configuration values that should be external
- Be careful with file permissions and access controls

## Structure & Organization
- Organize code logically with proper separation of concerns
- Keep related code together
- Make sure public APIs are documented
- Consider backward compatibility when making changes

## Testing & Reliability
- Consider edge cases and boundary conditions
- Make sure changes don't break existing functionality
- Add tests for new features when applicable

Review all code changes regardless of programming language, markup, configuration, or documentation files."""


@dataclass(frozen=True)
class GuardConfig:
    backend: str
    model: str
    credential: Optional[str] = field(default=None, repr=False)
    timeout_ms: int = TIMEOUT_MS_DEFAULT
    max_file_size: int = MAX_FILE_SIZE_DEFAULT
    rules_path: str = ".code-rules.md"
    ignore_path: str = ".commitguard-ignore"
    exclude: tuple[str, ...] = ()
    cache: str = "file"
    cache_dir: str = ".commitguard-cache"
    local_endpoint: str = DEFAULT_LOCAL_ENDPOINT


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _parse_int(value, default: int) -> int:
    """int(value), or ``default`` when value is missing, malformed or zero."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed or default


def probe_local_backend(endpoint: str = DEFAULT_LOCAL_ENDPOINT, timeout: float = PROBE_TIMEOUT_SECONDS) -> bool:
    """Return True if a credential-free local backend answers at ``endpoint``."""
    try:
        response = httpx.get(OllamaBackend(endpoint).tags_url, timeout=timeout)
    except httpx.HTTPError:
        return False
    return response.is_success


def _credential_for(name: str, environ: Mapping[str, str]) -> str | None:
    backend = BACKENDS.get(name)
    env_names = backend.CREDENTIAL_ENV if backend else ()
    for env_name in (*env_names, GENERIC_CREDENTIAL_ENV):
        value = environ.get(env_name)
        if value:
            return value
    return None


def select_backend(
    override: str | None,
    environ: Mapping[str, str],
    local_endpoint: str = DEFAULT_LOCAL_ENDPOINT,
    probe: Callable[[str], bool] = probe_local_backend,
) -> str:
    """Pick the backend for this run.

    Explicit override → first backend with a credential → reachable local
    backend → FALLBACK_BACKEND. An override is returned even when it names an
    unknown backend; get_backend rejects it when the call is made.
    """
    if override:
        return canonical_name(override)
    for name in AUTO_DETECT_ORDER:
        if any(environ.get(env_name) for env_name in BACKENDS[name].CREDENTIAL_ENV):
            return name
    if probe(local_endpoint):
        return OllamaBackend.NAME
    return FALLBACK_BACKEND


def _resolve_model(backend: str, override: str | None, environ: Mapping[str, str], file_model: str | None) -> str:
    if override:
        return override
    env_model = environ.get("AI_MODEL") or environ.get(f"{backend.upper()}_MODEL")
    if env_model:
        return env_model
    if file_model:
        return file_model
    descriptor = BACKENDS.get(backend)
    return descriptor.DEFAULT_MODEL if descriptor else ""


def _read_config_file(config_path: str) -> dict:
    path = Path(config_path)
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e
    if not isinstance(file_config, dict):
        logger.warning("Ignoring %s: expected a mapping at the top level", config_path)
        return {}
    return file_config


_STRING_SETTINGS = ("backend", "model", "rules", "ignore_file", "cache", "cache_dir", "local_endpoint")


def _check_types(settings: dict, config_path: str) -> None:
    """Raise ConfigurationError for values of the wrong type in the config file."""
    for key in _STRING_SETTINGS:
        value = settings.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(f"{config_path}: '{key}' must be a string, got {type(value).__name__}")

    exclude = settings.get("exclude")
    if exclude is None or isinstance(exclude, str):
        return
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        raise ConfigurationError(f"{config_path}: 'exclude' must be a pattern or a list of patterns")


def _as_patterns(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def load_config(
    config_path: str = ".commitguard.yml",
    cli_overrides: Optional[dict] = None,
    environ: Optional[Mapping[str, str]] = None,
    probe: Callable[[str], bool] = probe_local_backend,
) -> GuardConfig:
    environ = os.environ if environ is None else environ
    settings = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}
    settings.update(_read_config_file(config_path))
    _check_types(settings, config_path)

    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    local_endpoint = settings.get("local_endpoint") or DEFAULT_LOCAL_ENDPOINT
    backend_override = cli.get("backend") or environ.get("AI_PROVIDER") or settings.get("backend")
    backend = select_backend(backend_override, environ, local_endpoint, probe)
    model = _resolve_model(backend, cli.get("model"), environ, settings.get("model"))

    timeout_ms = _parse_int(
        cli.get("timeout_ms") or environ.get("AI_GUARD_TIMEOUT") or settings.get("timeout_ms"),
        TIMEOUT_MS_DEFAULT,
    )
    max_file_size = _parse_int(
        cli.get("max_file_size") or environ.get("AI_GUARD_MAX_FILE_SIZE") or settings.get("max_file_size"),
        MAX_FILE_SIZE_DEFAULT,
    )

    return GuardConfig(
        backend=backend,
        model=model,
        credential=_credential_for(backend, environ),
        timeout_ms=clamp(timeout_ms, TIMEOUT_MS_MIN, TIMEOUT_MS_MAX),
        max_file_size=clamp(max_file_size, MAX_FILE_SIZE_MIN, MAX_FILE_SIZE_MAX),
        rules_path=str(cli.get("rules") or settings.get("rules") or DEFAULT_CONFIG["rules"]),
        ignore_path=str(settings.get("ignore_file") or DEFAULT_CONFIG["ignore_file"]),
        exclude=_as_patterns(settings.get("exclude")),
        cache="none" if cli.get("no_cache") else str(settings.get("cache") or "file").lower(),
        cache_dir=str(settings.get("cache_dir") or DEFAULT_CONFIG["cache_dir"]),
        local_endpoint=local_endpoint,
    )


def load_rules(config: GuardConfig) -> str:
    """Project review rules, or DEFAULT_RULES when the file is absent or unreadable."""
    path = Path(config.rules_path)
    if not path.exists():
        return DEFAULT_RULES
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return DEFAULT_RULES
