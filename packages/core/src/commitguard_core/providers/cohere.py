from __future__ import annotations

from commitguard_core.providers.base import BackendDescriptor, BearerAuthMixin


class CohereBackend(BearerAuthMixin, BackendDescriptor):
    NAME = "cohere"
    ENDPOINT = "https://api.cohere.ai/v1/chat"
    DEFAULT_MODEL = "command-r"
    CREDENTIAL_ENV = ("COHERE_API_KEY",)

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "message": prompt,
            "max_tokens": self.MAX_TOKENS,
            "temperature": self.TEMPERATURE,
        }

    def extract_text(self, data) -> str:
        return data["text"]
