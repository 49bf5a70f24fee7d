"""
Client Orchestration Module

This module provides the unified interface for one studio session,
wiring transport, query cache, mutations and shared UI state together.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts (descriptors, errors)
2. Each StudioClient owns its own cache and stores; nothing is global
3. Every HTTP exchange is traceable through observability
"""

from __future__ import annotations
from typing import Any, Callable, Iterable, Mapping, Optional
import logging

import httpx

from .config import ClientConfig
from .contracts.descriptors import DescriptorMatcher, QueryDescriptor
from .contracts.policy import UnauthorizedPolicy
from .interaction import AsyncioFrameScheduler, FrameScheduler, ScaleDragController
from .observability import ObservabilityEngine
from .query import Fetcher, KeyResolver, MutationDefinition, MutationExecutor, QueryCache
from .state import ScaleStore, SelectionStore
from .transport import Transport


logger = logging.getLogger(__name__)


class StudioClient:
    """
    Unified client for the studio API.

    LAYER FLOW:
    ===========
    1. Read: descriptor -> cache -> resolver -> transport
    2. Write: mutation -> transport -> invalidation -> cache
    3. Input: pointer events -> drag controller -> frame -> scale store
    4. Observability: records every exchange and cache transition

    Use as an async context manager so the HTTP client is closed:

        async with StudioClient() as client:
            projects = await client.read(catalog.projects())
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        frame_scheduler: Optional[FrameScheduler] = None
    ):
        self._config = config or ClientConfig()

        self._observability = ObservabilityEngine(self._config.observability)
        self._transport = Transport(
            self._config.transport,
            client=http_client,
            observability=self._observability
        )
        self._resolver = KeyResolver()
        self._cache = QueryCache(
            self._transport,
            resolver=self._resolver,
            default_unauthorized=self._config.cache.default_unauthorized,
            observability=self._observability
        )
        self._mutations = MutationExecutor(
            self._transport,
            self._cache,
            observability=self._observability
        )

        self._scale = ScaleStore(self._config.scale.bounds())
        self._selection = SelectionStore()
        self._scale_control = ScaleDragController(
            self._scale,
            scheduler=frame_scheduler or AsyncioFrameScheduler(
                self._config.scale.frame_interval_seconds
            ),
            pixels_per_unit=self._config.scale.pixels_per_unit
        )

    async def __aenter__(self) -> StudioClient:
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        """Release the HTTP client. Cached data stays readable."""
        await self._transport.aclose()
        logger.debug("studio client closed")

    # =========================================================================
    # READ INTERFACE
    # =========================================================================

    async def read(
        self,
        descriptor: QueryDescriptor,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        *,
        enabled: bool = True,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        """Cached read of ``descriptor``."""
        return await self._cache.read(
            descriptor, on_unauthorized, enabled=enabled, fetcher=fetcher
        )

    async def refetch(
        self,
        descriptor: QueryDescriptor,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        *,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        return await self._cache.refetch(descriptor, on_unauthorized, fetcher=fetcher)

    async def poll(
        self,
        descriptor: QueryDescriptor,
        until: Callable[[Any], bool],
        interval: float = 3.0,
        *,
        max_attempts: Optional[int] = None,
        on_unauthorized: Optional[UnauthorizedPolicy] = None,
        fetcher: Optional[Fetcher] = None
    ) -> Any:
        """Refetch ``descriptor`` on an interval until ``until(data)`` holds."""
        return await self._cache.poll(
            descriptor, until, interval,
            max_attempts=max_attempts, on_unauthorized=on_unauthorized, fetcher=fetcher
        )

    def invalidate(self, matcher: DescriptorMatcher) -> int:
        return self._cache.invalidate(matcher)

    def resolve(self, descriptor: QueryDescriptor) -> str:
        """URL the default fetch path would request for ``descriptor``."""
        return self._resolver.resolve(descriptor)

    # =========================================================================
    # WRITE INTERFACE
    # =========================================================================

    async def mutate(
        self,
        method: str,
        target: str,
        body: Any = None,
        invalidates: Iterable[QueryDescriptor] = ()
    ) -> Any:
        return await self._mutations.mutate(method, target, body, invalidates)

    async def execute(
        self,
        definition: MutationDefinition,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None
    ) -> Any:
        """Run a catalog mutation such as ``catalog.UPDATE_SHOT``."""
        return await self._mutations.execute(definition, params, body)

    def is_pending(self, name: str) -> bool:
        return self._mutations.is_pending(name)

    # =========================================================================
    # DIRECT LAYER ACCESS
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def cache(self) -> QueryCache:
        return self._cache

    @property
    def mutations(self) -> MutationExecutor:
        return self._mutations

    @property
    def scale(self) -> ScaleStore:
        return self._scale

    @property
    def selection(self) -> SelectionStore:
        return self._selection

    @property
    def scale_control(self) -> ScaleDragController:
        return self._scale_control

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability
