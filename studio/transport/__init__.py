"""
Transport Layer

RESPONSIBILITY: One HTTP exchange per call, typed failures
ALLOWED INPUTS: method, resolved target, optional JSON body
OUTPUTS: decoded JSON (or empty dict), or a StudioError

WHAT THIS LAYER MUST NOT DO:
============================
- Retry
- Know about cache keys or invalidation
- Interpret response payloads
"""

from .http import Transport, JSON_CONTENT_TYPE

__all__ = ['Transport', 'JSON_CONTENT_TYPE']
