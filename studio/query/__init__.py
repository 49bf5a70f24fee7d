"""
Query Layer

RESPONSIBILITY: Descriptor resolution, cached reads, invalidating writes
ALLOWED INPUTS: QueryDescriptors, mutation definitions, a Transport
OUTPUTS: Cached results, explicit StudioErrors

WHAT THIS LAYER MUST NOT DO:
============================
- Expire entries by time (staleness is driven by invalidation only)
- Retry failed reads or writes
- Decide invalidation policy inside the executor (call sites own it)
"""

from .resolver import EndpointRule, DEFAULT_RULES, KeyResolver
from .cache import (
    EntryStatus, CacheEntry, CacheEntrySnapshot, CacheStats, QueryCache, Fetcher
)
from .mutation import MutationDefinition, MutationExecutor, InvalidationPolicy
from . import catalog

__all__ = [
    'EndpointRule', 'DEFAULT_RULES', 'KeyResolver',
    'EntryStatus', 'CacheEntry', 'CacheEntrySnapshot', 'CacheStats', 'QueryCache', 'Fetcher',
    'MutationDefinition', 'MutationExecutor', 'InvalidationPolicy',
    'catalog',
]
