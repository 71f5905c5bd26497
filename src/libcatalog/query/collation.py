"""
Case-insensitive, accent-sensitive string collation.

Both sides are brought to Unicode NFC and case-folded, so "FANTASY",
"Fantasy" and "fantasy" compare equal, "Straße" equals "STRASSE", while
"Café" and "Cafe" stay distinct.
"""

from __future__ import annotations

import unicodedata
from typing import Any

COLLATION_NAME = "CATALOG_NOCASE"


def collation_key(value: Any) -> str:
    text = unicodedata.normalize("NFC", str(value))
    return unicodedata.normalize("NFC", text.casefold())


def collation_equal(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is right
    return collation_key(left) == collation_key(right)


def compare(left: str, right: str) -> int:
    """Three-way comparison usable as a SQLite collation callable."""
    left_key = collation_key(left)
    right_key = collation_key(right)
    if left_key == right_key:
        return 0
    return -1 if left_key < right_key else 1
