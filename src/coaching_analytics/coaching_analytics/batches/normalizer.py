"""Canonical form for free-text batch names.

Batch membership is matched exactly (case-sensitive) against the ``batch``
value stored on students, so every caller has to pass names through the same
normalizer or lookups silently come back empty.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import unquote

_DASH_SPACING = re.compile(r"\s*-\s*")


def decode_batch_name(raw: str) -> str:
    """Form-style URL decoding (``+`` is a space); undecodable input is returned as-is."""

    try:
        return unquote(raw.replace("+", " "), errors="strict")
    except UnicodeDecodeError:
        return raw


def normalize_batch_name(raw: Optional[str], *, url_encoded: bool = False) -> str:
    """Normalize a batch name, e.g. ``" Batch - 7 "`` -> ``"Batch-7"``."""

    if not raw:
        return ""
    value = decode_batch_name(raw) if url_encoded else raw
    return _DASH_SPACING.sub("-", value.strip())


def batch_sort_key(name: str) -> tuple[int, str]:
    """Order ``Batch-1, Batch-2, ..., Batch-10`` by leading number; names without one sort first."""

    match = re.match(r"\s*(\d+)", name.replace("Batch-", "", 1))
    number = int(match.group(1)) if match else 0
    return number, name
