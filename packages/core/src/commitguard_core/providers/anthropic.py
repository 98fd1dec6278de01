from __future__ import annotations

from commitguard_core.providers.base import BackendDescriptor

_API_VERSION = "2023-06-01"


class ClaudeBackend(BackendDescriptor):
    NAME = "claude"
    ENDPOINT = "https://api.anthropic.com/v1/messages"
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    CREDENTIAL_ENV = ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")

    def build_headers(self, credential: str | None) -> dict[str, str]:
        return {
            "x-api-key": credential or "",
            "anthropic-version": _API_VERSION,
            "Content-Type": "application/json",
        }

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "max_tokens": self.MAX_TOKENS,
            "temperature": self.TEMPERATURE,
            "messages": [{"role": "user", "content": prompt}],
        }

    def extract_text(self, data) -> str:
        # Responses are a list of content blocks; only text blocks carry the review.
        blocks = [block["text"] for block in data["content"] if block.get("type", "text") == "text"]
        if not blocks:
            raise KeyError("content")
        return "".join(blocks)
