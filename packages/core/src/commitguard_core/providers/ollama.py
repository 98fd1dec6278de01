from __future__ import annotations

from commitguard_core.providers.base import BackendDescriptor

DEFAULT_LOCAL_ENDPOINT = "http://localhost:11434"


class OllamaBackend(BackendDescriptor):
    """Local Ollama server. No credential; the endpoint is configurable."""

    NAME = "ollama"
    DEFAULT_MODEL = "codellama"
    REQUIRES_CREDENTIAL = False

    def __init__(self, base_url: str = DEFAULT_LOCAL_ENDPOINT):
        self.base_url = base_url.rstrip("/")
        self.ENDPOINT = f"{self.base_url}/api/generate"

    @property
    def tags_url(self) -> str:
        return f"{self.base_url}/api/tags"

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": self.TEMPERATURE},
        }

    def extract_text(self, data) -> str:
        return data["response"]
