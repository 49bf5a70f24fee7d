"""
Shared Contracts

Immutable types used across all layers of the data layer:
query descriptors (cache keys) and the error taxonomy.
No behavior beyond validation and canonicalization.
"""

from .descriptors import (
    Scalar, NoParams, NO_PARAMS, ScalarParam, MapParams, Param, FirstParam,
    QueryDescriptor, DescriptorMatcher, matches, stringify_scalar, to_param
)
from .errors import (
    ErrorCode, StudioError, NetworkError, HttpError, DecodeError, describe_error
)
from .policy import UnauthorizedPolicy

__all__ = [
    'Scalar', 'NoParams', 'NO_PARAMS', 'ScalarParam', 'MapParams', 'Param', 'FirstParam',
    'QueryDescriptor', 'DescriptorMatcher', 'matches', 'stringify_scalar', 'to_param',
    'UnauthorizedPolicy',
    'ErrorCode', 'StudioError', 'NetworkError', 'HttpError', 'DecodeError', 'describe_error',
]
