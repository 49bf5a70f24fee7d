"""
Read Policies

Caller-selected behavior for reads that hit HTTP 401.
"""

from __future__ import annotations
from enum import Enum


class UnauthorizedPolicy(Enum):
    """What a cache read does when the server answers 401."""
    RETURN_NULL = "returnNull"   # resolve to None without raising
    THROW = "throw"              # propagate the HttpError
