from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 16


def fingerprint(changes: str, backend: str, model: str) -> str:
    """Cache key for a (changes, backend, model) triple.

    Line endings are normalised first so a CRLF checkout and an LF checkout of
    the same staged content share a slot. The parts are NUL-separated so
    shifting text between them changes the key.
    """
    normalized = changes.replace("\r\n", "\n")
    digest = hashlib.sha256("\0".join((normalized, backend, model)).encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]
