"""
Client Configuration

Nested dataclass configuration for every layer of the data layer.
Defaults mirror the production web client; ``ClientConfig.from_env``
overrides the transport settings from ``STUDIO_*`` environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os

from .observability import ObservabilityConfig
from .contracts.policy import UnauthorizedPolicy
from .state.scale import ScaleBounds, MIN_SCALE, MAX_SCALE, DEFAULT_SCALE


DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "StudioClient/1.0"

# One pixel of horizontal drag moves the scale by 1/200
PIXELS_PER_SCALE_UNIT = 200.0
FRAME_INTERVAL_SECONDS = 1 / 60


@dataclass
class TransportConfig:
    """HTTP transport settings."""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")


@dataclass
class CacheConfig:
    """Query cache settings. Staleness is unbounded; there is no TTL knob."""
    default_unauthorized: UnauthorizedPolicy = UnauthorizedPolicy.THROW


@dataclass
class ScaleConfig:
    """UI scale bounds and drag-control tuning."""
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    default_scale: float = DEFAULT_SCALE
    pixels_per_unit: float = PIXELS_PER_SCALE_UNIT
    frame_interval_seconds: float = FRAME_INTERVAL_SECONDS

    def __post_init__(self):
        if self.pixels_per_unit <= 0:
            raise ValueError("pixels_per_unit must be positive")
        if self.frame_interval_seconds <= 0:
            raise ValueError("frame_interval_seconds must be positive")
        # ScaleBounds validates min <= default <= max
        self.bounds()

    def bounds(self) -> ScaleBounds:
        return ScaleBounds(
            min_scale=self.min_scale,
            max_scale=self.max_scale,
            default_scale=self.default_scale
        )


@dataclass
class ClientConfig:
    """Unified configuration for one StudioClient."""
    transport: TransportConfig = None
    cache: CacheConfig = None
    scale: ScaleConfig = None
    observability: ObservabilityConfig = None

    def __post_init__(self):
        self.transport = self.transport or TransportConfig()
        self.cache = self.cache or CacheConfig()
        self.scale = self.scale or ScaleConfig()
        self.observability = self.observability or ObservabilityConfig()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
        """
        Build a config from environment variables.

        STUDIO_BASE_URL, STUDIO_TIMEOUT_SECONDS, STUDIO_USER_AGENT
        """
        env = os.environ if environ is None else environ
        transport = TransportConfig(
            base_url=env.get("STUDIO_BASE_URL", DEFAULT_BASE_URL),
            timeout_seconds=float(env.get("STUDIO_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            user_agent=env.get("STUDIO_USER_AGENT", DEFAULT_USER_AGENT)
        )
        return cls(transport=transport)
