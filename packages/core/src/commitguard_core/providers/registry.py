"""Name → descriptor lookup.

Callers resolve a descriptor once and then only use the BackendDescriptor
interface; nothing downstream branches on which backend is active.
"""

from __future__ import annotations

from commitguard_core.errors import ConfigurationError
from commitguard_core.providers.anthropic import ClaudeBackend
from commitguard_core.providers.base import BackendDescriptor
from commitguard_core.providers.cohere import CohereBackend
from commitguard_core.providers.gemini import GeminiBackend
from commitguard_core.providers.ollama import DEFAULT_LOCAL_ENDPOINT, OllamaBackend
from commitguard_core.providers.openai import OpenAIBackend

BACKENDS: dict[str, BackendDescriptor] = {
    backend.NAME: backend
    for backend in (OpenAIBackend(), ClaudeBackend(), GeminiBackend(), CohereBackend(), OllamaBackend())
}

ALIASES = {"anthropic": "claude", "google": "gemini"}

# Order in which credentials are probed when no backend is configured.
AUTO_DETECT_ORDER = ("openai", "claude", "gemini", "cohere")

GENERIC_CREDENTIAL_ENV = "AI_API_KEY"


def canonical_name(name: str) -> str:
    name = name.strip().lower()
    return ALIASES.get(name, name)


def get_backend(name: str, local_endpoint: str | None = None) -> BackendDescriptor:
    key = canonical_name(name)
    if key not in BACKENDS:
        supported = ", ".join(sorted(BACKENDS))
        raise ConfigurationError(f"Unsupported AI provider: {name!r}. Choose one of: {supported}.")
    if key == OllamaBackend.NAME and local_endpoint and local_endpoint.rstrip("/") != DEFAULT_LOCAL_ENDPOINT:
        return OllamaBackend(local_endpoint)
    return BACKENDS[key]
