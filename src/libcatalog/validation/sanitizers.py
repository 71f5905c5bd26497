"""
Sanitizers applied to raw form values before and after validation.
"""

from __future__ import annotations

import html
from typing import Any, List


def trim(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


_EXTRA_ENTITIES = str.maketrans({"/": "&#x2F;", "\\": "&#x5C;", "`": "&#96;"})


def escape(value: str) -> str:
    """
    HTML-escape ``value`` for safe storage and display.

    Besides ``& < > " '`` this also replaces ``/``, ``\\`` and a backtick.
    """
    return html.escape(value, quote=True).translate(_EXTRA_ENTITIES)


def to_list(value: Any) -> List[Any]:
    """
    Normalize an absent, scalar or multi-valued form input into a list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
