"""
Key Resolver
============

Translates a QueryDescriptor ("what identifies this data") into a request
target ("how to fetch it"). This is the only place URL-building quirks live,
so cache keys stay stable regardless of how endpoints want parameters.

RESOLUTION ORDER:
=================
1. No parameters                -> base path
2. Mapping parameter            -> base path + ?urlencoded defined pairs
3. Endpoint rule for base path  -> base path + ?name=value[&name=value]
4. Fallback                     -> all elements joined with "/"

FALSY PARAMETERS:
=================
Single-parameter rules only fire on a truthy id. An empty string or 0
falls through to the fallback join, so ("/api/scripts", "") resolves to
"/api/scripts/". Absent and empty ids are not distinguished.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import quote, urlencode

from ..contracts.descriptors import (
    MapParams, NoParams, QueryDescriptor, ScalarParam, stringify_scalar
)


# =============================================================================
# ENDPOINT RULES
# =============================================================================

@dataclass(frozen=True)
class EndpointRule:
    """
    Maps a base path to the query-string names of its scalar parameters.

    The first name is the required parent id. Later names are optional
    and are only emitted when their parameter is truthy.
    """
    path: str
    param_names: Tuple[str, ...]
    require_truthy: bool = True

    def __post_init__(self):
        if not self.param_names:
            raise ValueError(f"EndpointRule for {self.path} needs at least one parameter name")

    def applies_to(self, first: ScalarParam) -> bool:
        if self.require_truthy:
            return first.is_truthy
        return first.is_defined

    def build(self, descriptor: QueryDescriptor) -> str:
        params = descriptor.params
        first_name = self.param_names[0]
        parts = [f"{first_name}={_quote(params[0])}"]

        for index, name in enumerate(self.param_names[1:], start=1):
            if index >= len(params):
                break
            param = params[index]
            if isinstance(param, ScalarParam) and param.is_truthy:
                parts.append(f"{name}={_quote(param)}")

        return f"{descriptor.path}?{'&'.join(parts)}"


def _quote(param: ScalarParam) -> str:
    return quote(param.render(), safe='')


DEFAULT_RULES: Tuple[EndpointRule, ...] = (
    EndpointRule("/api/scripts", ("projectId",)),
    EndpointRule("/api/scenes", ("projectId",)),
    EndpointRule("/api/shots", ("sceneId",)),
    EndpointRule("/api/characters", ("projectId",)),
    EndpointRule("/api/performance-guides", ("sceneId", "characterId"), require_truthy=False),
    EndpointRule("/api/production-notes", ("sceneId",)),
)


# =============================================================================
# RESOLVER
# =============================================================================

class KeyResolver:
    """
    Resolve descriptors to request targets.

    GUARANTEES:
    ===========
    1. resolve() is a pure function of (descriptor, rule table)
    2. Mapping parameters keep their iteration order in the query string
    3. Undefined and None mapping values are never emitted
    """

    def __init__(self, rules: Optional[Iterable[EndpointRule]] = None):
        self._rules: Dict[str, EndpointRule] = {
            rule.path: rule for rule in (DEFAULT_RULES if rules is None else rules)
        }

    @property
    def rules(self) -> Tuple[EndpointRule, ...]:
        return tuple(self._rules.values())

    def with_rule(self, rule: EndpointRule) -> KeyResolver:
        """Return a new resolver with ``rule`` added (or replacing one for its path)."""
        merged = dict(self._rules)
        merged[rule.path] = rule
        return KeyResolver(merged.values())

    def resolve(self, descriptor: QueryDescriptor) -> str:
        first = descriptor.first

        if isinstance(first, NoParams):
            return descriptor.path

        if isinstance(first, MapParams):
            return self._resolve_mapping(descriptor.path, first)

        rule = self._rules.get(descriptor.path)
        if rule is not None and rule.applies_to(first):
            return rule.build(descriptor)

        return self._join(descriptor)

    def _resolve_mapping(self, path: str, params: MapParams) -> str:
        pairs = [(key, stringify_scalar(value)) for key, value in params.defined_items()]
        query = urlencode(pairs)
        return f"{path}?{query}" if query else path

    def _join(self, descriptor: QueryDescriptor) -> str:
        segments = [descriptor.path]
        for param in descriptor.params:
            # mappings only occur first and are handled above
            segments.append(param.render())
        return "/".join(segments)


__all__ = ['EndpointRule', 'DEFAULT_RULES', 'KeyResolver']
