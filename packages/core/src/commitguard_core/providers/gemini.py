from __future__ import annotations

from urllib.parse import quote

from commitguard_core.providers.base import BackendDescriptor


class GeminiBackend(BackendDescriptor):
    """Google Gemini. The API key travels in the query string, not a header."""

    NAME = "gemini"
    ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    DEFAULT_MODEL = "gemini-2.0-flash"
    CREDENTIAL_ENV = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

    def build_url(self, model: str, credential: str | None) -> str:
        return self.ENDPOINT.format(model=quote(model, safe="")) + f"?key={quote(credential or '', safe='')}"

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.TEMPERATURE,
                "maxOutputTokens": self.MAX_TOKENS,
            },
        }

    def extract_text(self, data) -> str:
        return data["candidates"][0]["content"]["parts"][0]["text"]
