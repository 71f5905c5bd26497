"""
Filter expressions shared by the document stores.
"""

from .collation import collation_equal, collation_key
from .expressions import Q

__all__ = ["Q", "collation_equal", "collation_key"]
