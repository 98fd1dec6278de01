from __future__ import annotations

from commitguard_core.providers.base import BackendDescriptor, BearerAuthMixin


class OpenAIBackend(BearerAuthMixin, BackendDescriptor):
    NAME = "openai"
    ENDPOINT = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o"
    CREDENTIAL_ENV = ("OPENAI_API_KEY",)

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.TEMPERATURE,
            "max_tokens": self.MAX_TOKENS,
        }

    def extract_text(self, data) -> str:
        return data["choices"][0]["message"]["content"]
