"""Backend descriptors implementing the Template Method pattern.

Every backend shares the same request/response algorithm:
    build_request() → build_url() + build_headers() + build_payload()
    extract_response() → extract_text()   ← navigates the backend's JSON shape

Subclasses declare class attributes (NAME, ENDPOINT, DEFAULT_MODEL,
CREDENTIAL_ENV) and implement two things only:
  - build_payload: the JSON body for one prompt
  - extract_text: the generated text inside a successful JSON response

URL and header assembly, the credential check and shape validation live
here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from commitguard_core.errors import ConfigurationError, ParseError

# Shared defaults; subclasses may override as class attributes.
_MAX_TOKENS = 1000
_TEMPERATURE = 0.1


@dataclass(frozen=True)
class BackendRequest:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict = field(default_factory=dict)


class BackendDescriptor(ABC):
    NAME: str = ""
    ENDPOINT: str = ""
    DEFAULT_MODEL: str = ""
    # Environment variables holding this backend's credential, highest priority first.
    CREDENTIAL_ENV: tuple[str, ...] = ()
    REQUIRES_CREDENTIAL: bool = True
    MAX_TOKENS: int = _MAX_TOKENS
    TEMPERATURE: float = _TEMPERATURE

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def build_request(self, prompt: str, model: str, credential: str | None = None) -> BackendRequest:
        if self.REQUIRES_CREDENTIAL and not credential:
            env_names = " or ".join(self.CREDENTIAL_ENV) or "a credential"
            raise ConfigurationError(f"No API key for {self.NAME}. Set {env_names}.")
        return BackendRequest(
            url=self.build_url(model, credential),
            headers=self.build_headers(credential),
            body=self.build_payload(prompt, model),
        )

    def extract_response(self, data) -> str:
        try:
            text = self.extract_text(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ParseError(f"{self.NAME} response has no generated text ({type(e).__name__}: {e})") from e
        if not isinstance(text, str):
            raise ParseError(f"{self.NAME} response text is {type(text).__name__}, expected str")
        return text

    # ------------------------------------------------------------------ #
    # Abstract: implement in each backend                                  #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def build_payload(self, prompt: str, model: str) -> dict:
        """Return the JSON body for a single review prompt."""

    @abstractmethod
    def extract_text(self, data) -> str:
        """Navigate the decoded JSON response to the generated text.

        May raise KeyError, IndexError, TypeError or AttributeError on an unexpected shape;
        extract_response turns those into ParseError.
        """

    # ------------------------------------------------------------------ #
    # Overridable defaults                                                 #
    # ------------------------------------------------------------------ #

    def build_url(self, model: str, credential: str | None) -> str:
        return self.ENDPOINT

    def build_headers(self, credential: str | None) -> dict[str, str]:
        return {"Content-Type": "application/json"}


class BearerAuthMixin:
    """Send the credential as an ``Authorization: Bearer`` header."""

    def build_headers(self, credential: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}
