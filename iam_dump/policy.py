"""Encoding helpers for IAM policy documents.

IAM transmits policy documents as URL-encoded JSON strings. boto3 decodes
the documents it recognises before handing the response back, so
:func:`decode_policy_document` accepts both the raw string form and an
already decoded document.
"""
from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import quote, unquote

from .errors import DecodeError

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_policy_document(raw: Any, *, identifier: str | None = None) -> Any:
    """Return the JSON document encoded in ``raw``.

    Raises :class:`DecodeError` when ``raw`` holds a ``%`` that is not
    followed by two hex digits, when the escapes do not form UTF-8, or when
    the decoded text is not valid JSON.
    """

    if isinstance(raw, (dict, list)):
        return raw
    if not isinstance(raw, str):
        raise DecodeError(
            f"expected a string policy document, got {type(raw).__name__}",
            operation="decode policy document",
            identifier=identifier,
        )
    malformed = _MALFORMED_ESCAPE.search(raw)
    if malformed:
        raise DecodeError(
            f"malformed percent-encoding at offset {malformed.start()}: "
            f"{raw[malformed.start():malformed.start() + 3]!r}",
            operation="decode policy document",
            identifier=identifier,
        )
    try:
        text = unquote(raw, errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"invalid percent-encoding: {exc}",
            operation="decode policy document",
            identifier=identifier,
        ) from exc
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeError(
            f"invalid JSON: {exc}",
            operation="decode policy document",
            identifier=identifier,
        ) from exc


def encode_policy_document(document: Any) -> str:
    """Serialise ``document`` the way IAM transmits it."""

    return quote(json.dumps(document, separators=(",", ":")), safe="")


__all__ = ["decode_policy_document", "encode_policy_document"]
