"""
Mutation Executor

One-shot writes through the transport, followed by cache invalidation.

The executor is mechanism only. Which cache keys a write makes stale is
decided at the call site, either by passing ``invalidates`` directly or
through a MutationDefinition from the catalog.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Mapping, Optional, Tuple
import logging

from ..contracts.descriptors import QueryDescriptor
from ..observability import ObservabilityEngine
from .cache import QueryCache

if TYPE_CHECKING:
    from ..transport import Transport


logger = logging.getLogger(__name__)

InvalidationPolicy = Callable[[Mapping[str, Any]], Tuple[QueryDescriptor, ...]]


def _no_invalidation(params: Mapping[str, Any]) -> Tuple[QueryDescriptor, ...]:
    return ()


@dataclass(frozen=True)
class MutationDefinition:
    """
    Declarative write: HTTP method, target template and invalidation policy.

    ``path`` is a ``str.format`` template filled from the call's params,
    e.g. ``/api/shots/{shotId}``. ``invalidates`` receives the same params
    and returns the descriptor prefixes to mark stale on success.
    """
    name: str
    method: str
    path: str
    invalidates: InvalidationPolicy = field(default=_no_invalidation)

    def target(self, params: Mapping[str, Any]) -> str:
        try:
            return self.path.format(**params)
        except KeyError as e:
            raise ValueError(f"Mutation {self.name} is missing path parameter {e}") from e


class MutationExecutor:
    """
    Execute writes with no retry.

    GUARANTEES:
    ===========
    1. Exactly one transport call per mutate()
    2. Invalidation runs only after a successful response
    3. Failures propagate unchanged and invalidate nothing
    """

    def __init__(
        self,
        transport: Transport,
        cache: QueryCache,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._transport = transport
        self._cache = cache
        self._observability = observability or ObservabilityEngine()
        self._pending: Dict[str, int] = {}

    async def mutate(
        self,
        method: str,
        target: str,
        body: Any = None,
        invalidates: Iterable[QueryDescriptor] = ()
    ) -> Any:
        """Send one write and, on success, invalidate the given prefixes."""
        try:
            result = await self._transport.send(method, target, body)
        except Exception:
            self._observability.count("mutations_total", {"outcome": "failure"})
            raise

        self._observability.count("mutations_total", {"outcome": "success"})
        for prefix in invalidates:
            self._cache.invalidate(prefix)
        return result

    async def execute(
        self,
        definition: MutationDefinition,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None
    ) -> Any:
        """Run a catalog mutation; its policy picks what to invalidate."""
        params = params or {}
        target = definition.target(params)

        self._pending[definition.name] = self._pending.get(definition.name, 0) + 1
        try:
            logger.debug("mutation %s: %s %s", definition.name, definition.method, target)
            return await self.mutate(
                definition.method,
                target,
                body,
                invalidates=definition.invalidates(params)
            )
        finally:
            self._pending[definition.name] -= 1
            if not self._pending[definition.name]:
                del self._pending[definition.name]

    def is_pending(self, name: str) -> bool:
        """True while a mutation with this name is in flight."""
        return self._pending.get(name, 0) > 0


__all__ = ['MutationDefinition', 'MutationExecutor', 'InvalidationPolicy']
