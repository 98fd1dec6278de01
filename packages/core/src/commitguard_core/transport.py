"""Backend dispatch: one HTTP POST raced against a hard deadline.

call_with_deadline is the only cancellation point in a run. asyncio.wait_for
cancels the awaiting task when the deadline passes, which aborts the httpx
request in flight; the AsyncClient context manager then closes its
connections, so nothing keeps running after a timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from commitguard_core.errors import CommitGuardError, NetworkError, ParseError, ProviderError, ReviewTimeoutError
from commitguard_core.providers.base import BackendDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 2
_ERROR_BODY_LIMIT = 500


async def call_with_deadline(call: Callable[[], Awaitable[T]], timeout_ms: int) -> T:
    """Await ``call()`` for at most ``timeout_ms`` milliseconds.

    Exactly one of three things happens: the call's result is returned, the
    call's own exception propagates, or ReviewTimeoutError is raised and the
    call is cancelled.
    """
    try:
        return await asyncio.wait_for(call(), timeout=timeout_ms / 1000)
    except ReviewTimeoutError:
        raise
    except asyncio.TimeoutError as e:
        raise ReviewTimeoutError(timeout_ms) from e


def _scrub(text: str, credential: str | None) -> str:
    if credential:
        text = text.replace(credential, "***")
    return text


async def _post_once(
    client: httpx.AsyncClient,
    backend: BackendDescriptor,
    prompt: str,
    model: str,
    credential: str | None,
    timeout_ms: int,
) -> str:
    request = backend.build_request(prompt, model, credential)
    try:
        response = await client.post(request.url, headers=request.headers, json=request.body)
    except httpx.TimeoutException as e:
        raise ReviewTimeoutError(timeout_ms) from e
    except httpx.HTTPError as e:
        # httpx messages can include the request URL, which carries the key for some backends.
        raise NetworkError(f"{backend.NAME} request failed: {_scrub(str(e), credential)}") from None

    if not response.is_success:
        body = _scrub(response.text, credential)
        raise ProviderError(
            f"API request failed ({response.status_code}): {body[:_ERROR_BODY_LIMIT]}",
            status=response.status_code,
            body=body,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise ParseError(f"{backend.NAME} returned a non-JSON body") from e

    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        message = error.get("message") if isinstance(error, dict) else None
        raise ProviderError(
            _scrub(str(message or error), credential),
            status=response.status_code,
            body=_scrub(response.text, credential),
        )

    return backend.extract_response(data)


def _is_retryable(error: CommitGuardError) -> bool:
    if isinstance(error, NetworkError):
        return True
    return isinstance(error, ProviderError) and error.retryable


async def request_review(
    backend: BackendDescriptor,
    prompt: str,
    model: str,
    credential: str | None,
    timeout_ms: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Send ``prompt`` to ``backend`` and return the generated text.

    Transport failures and 5xx answers are retried with exponential backoff,
    but every attempt shares the one deadline: a slow first attempt leaves
    less time for the second, and the total never exceeds ``timeout_ms``.
    """

    async def _attempts() -> str:
        async with httpx.AsyncClient(timeout=timeout_ms / 1000, transport=transport) as client:
            for attempt in range(MAX_ATTEMPTS):
                try:
                    return await _post_once(client, backend, prompt, model, credential, timeout_ms)
                except (NetworkError, ProviderError) as e:
                    if attempt == MAX_ATTEMPTS - 1 or not _is_retryable(e):
                        raise
                    delay = 2**attempt
                    logger.warning(
                        "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                        backend.NAME,
                        attempt + 1,
                        MAX_ATTEMPTS,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)

    return await call_with_deadline(_attempts, timeout_ms)
