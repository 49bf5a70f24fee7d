"""
Query Descriptors

A query descriptor is the structural identity of a read: a base path plus
ordered parameters. It is used twice:

1. As the CACHE KEY (canonical, hashable, order-insensitive for mappings)
2. As the BLUEPRINT for the concrete request (see query.resolver)

PARAMETER VARIANTS (closed set):
================================
- NoParams      no parameters, or the first one is undefined
- ScalarParam   an opaque id; value None means "undefined"
- MapParams     ordered key/value pairs; only legal as the FIRST parameter

Trailing undefined parameters are dropped on construction, so
("/api/x", None) and ("/api/x",) are the same descriptor.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple, Union
import json
import math


Scalar = Union[str, int, float, bool]


# =============================================================================
# PARAMETER VARIANTS
# =============================================================================

@dataclass(frozen=True)
class NoParams:
    """Marker for a descriptor without usable parameters."""


NO_PARAMS = NoParams()


def stringify_scalar(value: Optional[Scalar]) -> str:
    """Render a scalar the way it appears in a URL."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _scalar_token(value: Optional[Scalar]) -> Tuple[Any, ...]:
    # bool is a subclass of int; tag it first so True and 1 stay distinct
    if value is None:
        return ("undefined",)
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("num", value)
    return ("str", str(value))


@dataclass(frozen=True)
class ScalarParam:
    """A single opaque parameter (usually a parent id)."""
    value: Optional[Scalar]

    def __post_init__(self):
        if self.value is not None and not isinstance(self.value, (str, int, float, bool)):
            raise TypeError(f"Scalar parameter must be str, int, float or bool, got {type(self.value).__name__}")

    @property
    def is_defined(self) -> bool:
        return self.value is not None

    @property
    def is_truthy(self) -> bool:
        """Truthiness as the endpoint rules see it ('' and 0 are falsy)."""
        if self.value is None:
            return False
        if isinstance(self.value, float) and math.isnan(self.value):
            return False
        return bool(self.value)

    def render(self) -> str:
        return stringify_scalar(self.value)

    def token(self) -> Tuple[Any, ...]:
        return _scalar_token(self.value)


@dataclass(frozen=True)
class MapParams:
    """Ordered key/value parameters, rendered as a query string."""
    items: Tuple[Tuple[str, Optional[Scalar]], ...] = field(default_factory=tuple)

    @staticmethod
    def from_mapping(mapping: Mapping[str, Optional[Scalar]]) -> MapParams:
        return MapParams(items=tuple((str(k), v) for k, v in mapping.items()))

    def defined_items(self) -> Tuple[Tuple[str, Scalar], ...]:
        """Pairs whose value is not None, in iteration order."""
        return tuple((k, v) for k, v in self.items if v is not None)

    def token(self) -> Tuple[Any, ...]:
        canonical = sorted(
            ((k, _scalar_token(v)) for k, v in self.defined_items()),
            key=lambda pair: pair[0]
        )
        return ("map", tuple(canonical))

    def contains(self, other: MapParams) -> bool:
        """True if every defined pair of ``other`` is present here."""
        mine = dict((k, _scalar_token(v)) for k, v in self.defined_items())
        return all(
            k in mine and mine[k] == _scalar_token(v)
            for k, v in other.defined_items()
        )


Param = Union[ScalarParam, MapParams]
FirstParam = Union[NoParams, ScalarParam, MapParams]


def to_param(raw: Any) -> Param:
    """Wrap a raw Python value in its parameter variant."""
    if isinstance(raw, (ScalarParam, MapParams)):
        return raw
    if isinstance(raw, Mapping):
        return MapParams.from_mapping(raw)
    return ScalarParam(raw)


# =============================================================================
# DESCRIPTOR
# =============================================================================

@dataclass(frozen=True)
class QueryDescriptor:
    """
    Immutable structural key for a read operation.

    INVARIANTS:
    ===========
    - path is a non-empty string and always comes first
    - a MapParams may only appear as the first parameter
    - no trailing undefined parameters
    """
    path: str
    params: Tuple[Param, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.path or not isinstance(self.path, str):
            raise ValueError("QueryDescriptor path must be a non-empty string")

        params = tuple(self.params)
        for index, param in enumerate(params):
            if not isinstance(param, (ScalarParam, MapParams)):
                raise TypeError(f"Parameter {index} is not a ScalarParam or MapParams")
            if index > 0 and isinstance(param, MapParams):
                raise ValueError("Mapping parameters are only allowed in first position")

        while params and isinstance(params[-1], ScalarParam) and not params[-1].is_defined:
            params = params[:-1]
        object.__setattr__(self, 'params', params)

    @staticmethod
    def of(path: str, *raw: Any) -> QueryDescriptor:
        """Build a descriptor from raw values: mappings become MapParams."""
        return QueryDescriptor(path=path, params=tuple(to_param(r) for r in raw))

    @property
    def first(self) -> FirstParam:
        if not self.params:
            return NO_PARAMS
        head = self.params[0]
        if isinstance(head, ScalarParam) and not head.is_defined:
            return NO_PARAMS
        return head

    @property
    def key(self) -> Tuple[Any, ...]:
        """Canonical hashable cache key."""
        return (self.path,) + tuple(p.token() for p in self.params)

    @property
    def label(self) -> str:
        """Human-readable form for logs, e.g. ``["/api/scripts", "p1"]``."""
        rendered = [self.path]
        for param in self.params:
            if isinstance(param, MapParams):
                rendered.append(dict(param.defined_items()))
            else:
                rendered.append(param.value)
        return json.dumps(rendered, default=str)

    def is_prefix_of(self, other: QueryDescriptor) -> bool:
        """
        Structural prefix match used by invalidation.

        Scalars must be equal; a mapping matches when its defined pairs
        are a subset of the other mapping (partial match).
        """
        if self.path != other.path or len(self.params) > len(other.params):
            return False
        for mine, theirs in zip(self.params, other.params):
            if isinstance(mine, MapParams) and isinstance(theirs, MapParams):
                if not theirs.contains(mine):
                    return False
            elif mine.token() != theirs.token():
                return False
        return True

    def __str__(self) -> str:
        return self.label


DescriptorMatcher = Union[QueryDescriptor, Callable[[QueryDescriptor], bool]]


def matches(matcher: DescriptorMatcher, descriptor: QueryDescriptor) -> bool:
    """Apply a prefix descriptor or a predicate to a descriptor."""
    if isinstance(matcher, QueryDescriptor):
        return matcher.is_prefix_of(descriptor)
    return bool(matcher(descriptor))
