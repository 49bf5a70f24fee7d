"""
Studio Data Layer

Client-side data layer for the film pre-production studio API. Views
read server state through a shared query cache, write through mutations
that invalidate what they make stale, and share a small amount of UI
state (scale, selection).

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Responsibility: Query descriptors (cache keys) and the error taxonomy
   - Outputs: Immutable, canonicalized values
   - MUST NOT: Perform I/O

2. TRANSPORT LAYER (transport/)
   - Responsibility: One HTTP exchange per call, credentialed, JSON in/out
   - Outputs: Decoded JSON, or NetworkError / HttpError / DecodeError
   - MUST NOT: Retry, cache, or interpret payloads

3. QUERY LAYER (query/)
   - Responsibility: Descriptor resolution, cached reads, invalidating writes
   - Allowed inputs: QueryDescriptors, MutationDefinitions
   - MUST NOT: Expire entries by time

4. SHARED STATE (state/)
   - Responsibility: UI scale and selection slices, owned per client
   - MUST NOT: Persist anything

5. INTERACTION LAYER (interaction/)
   - Responsibility: Drag-to-scale, coalesced to one write per frame
   - MUST NOT: Clamp (the scale store owns the bounds)

6. OBSERVABILITY (observability/)
   - Responsibility: Request log and counters for every layer
   - MUST NOT: Change behavior

CONSTRAINTS ENFORCED:
=====================
- Explicit errors: every failure surfaces as a StudioError subclass
- No retries anywhere
- Staleness comes from invalidation only, never from time
"""

from .config import ClientConfig, TransportConfig, CacheConfig, ScaleConfig
from .contracts import (
    QueryDescriptor, MapParams, ScalarParam, UnauthorizedPolicy,
    StudioError, NetworkError, HttpError, DecodeError, describe_error
)
from .engine import StudioClient
from .query import catalog

__all__ = [
    'StudioClient',
    'ClientConfig', 'TransportConfig', 'CacheConfig', 'ScaleConfig',
    'QueryDescriptor', 'MapParams', 'ScalarParam', 'UnauthorizedPolicy',
    'StudioError', 'NetworkError', 'HttpError', 'DecodeError', 'describe_error',
    'catalog',
]
