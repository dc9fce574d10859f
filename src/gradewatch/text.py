# Copyright (c) Syntropy Systems
"""Locale-insensitive text canonicalisation."""
from __future__ import annotations

import unicodedata


def normalize(text: str) -> str:
    """Canonicalise text for keyword matching.

    Decomposes to NFD, drops combining marks, trims and lower-cases, so
    "Högskolepoäng" and "hogskolepoang" compare equal.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()
