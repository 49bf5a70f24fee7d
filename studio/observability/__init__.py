"""
Observability Layer

RESPONSIBILITY: Request log, cache/mutation metrics
ALLOWED INPUTS: Records pushed by transport, cache and mutation executor
OUTPUTS: RequestRecord lists, MetricPoint series, aggregates

WHAT THIS LAYER MUST NOT DO:
============================
- Modify data-layer behavior
- Filter or interpret records (only store them)
- Block or delay requests

Collectors are append-only and hand out copies. Both are bounded: the
request log and every metric series keep only their newest entries.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple


# =============================================================================
# REQUEST LOG
# =============================================================================

class RequestOutcome(Enum):
    """How a single exchange ended."""
    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"


@dataclass(frozen=True)
class RequestRecord:
    """Immutable record of one transport exchange."""
    sequence: int
    method: str
    target: str
    outcome: RequestOutcome
    duration_ms: float
    recorded_at: datetime
    status: Optional[int] = None
    detail: str = ""


class RequestLogCollector:
    """
    Append-only log of transport exchanges.

    Sequence numbers are assigned in arrival order, which is also
    response order since records are written on completion. Once
    ``max_records`` is reached the oldest record is dropped; sequence
    numbers keep counting.
    """

    def __init__(self, max_records: int = 1000):
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self._records: Deque[RequestRecord] = deque(maxlen=max_records)
        self._sequence: int = 0

    def collect(
        self,
        method: str,
        target: str,
        outcome: RequestOutcome,
        duration_ms: float,
        status: Optional[int] = None,
        detail: str = ""
    ) -> RequestRecord:
        self._sequence += 1
        record = RequestRecord(
            sequence=self._sequence,
            method=method,
            target=target,
            outcome=outcome,
            duration_ms=duration_ms,
            recorded_at=datetime.now(timezone.utc),
            status=status,
            detail=detail
        )
        self._records.append(record)
        return record

    def get_records(
        self,
        outcome: Optional[RequestOutcome] = None,
        method: Optional[str] = None
    ) -> List[RequestRecord]:
        """Get records, optionally filtered."""
        records = list(self._records)
        if outcome:
            records = [r for r in records if r.outcome == outcome]
        if method:
            records = [r for r in records if r.method == method.upper()]
        return records

    @property
    def record_count(self) -> int:
        return len(self._records)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    recorded_at: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect metrics from transport, cache and mutations.

    Each metric keeps at most ``max_points`` recent data points. Totals
    are tracked separately and stay exact after old points are dropped;
    ``compute_aggregates`` covers only the retained window.
    """

    def __init__(self, max_points: int = 1000):
        if max_points < 1:
            raise ValueError("max_points must be at least 1")
        self._max_points = max_points
        self._metrics: Dict[str, Deque[MetricPoint]] = {}
        self._totals: Dict[str, float] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        defaults = [
            MetricDefinition(
                name="request_duration_ms",
                metric_type=MetricType.TIMING,
                description="Transport exchange duration in milliseconds",
                labels=("method",)
            ),
            MetricDefinition(
                name="cache_hits_total",
                metric_type=MetricType.COUNTER,
                description="Reads served from a fresh cache entry"
            ),
            MetricDefinition(
                name="cache_fetches_total",
                metric_type=MetricType.COUNTER,
                description="Reads that started a network fetch"
            ),
            MetricDefinition(
                name="cache_deduplicated_total",
                metric_type=MetricType.COUNTER,
                description="Reads that joined an in-flight fetch"
            ),
            MetricDefinition(
                name="cache_invalidations_total",
                metric_type=MetricType.COUNTER,
                description="Entries marked stale by invalidation"
            ),
            MetricDefinition(
                name="mutations_total",
                metric_type=MetricType.COUNTER,
                description="Completed mutations",
                labels=("outcome",)
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = deque(maxlen=self._max_points)
            self._totals[definition.name] = 0.0

    def record(
        self,
        metric_name: str,
        value: float = 1.0,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a metric data point."""
        if metric_name not in self._metrics:
            self._metrics[metric_name] = deque(maxlen=self._max_points)
            self._totals[metric_name] = 0.0

        label_tuple = tuple(sorted(labels.items())) if labels else ()

        self._metrics[metric_name].append(MetricPoint(
            metric_name=metric_name,
            value=value,
            recorded_at=datetime.now(timezone.utc),
            labels=label_tuple
        ))
        self._totals[metric_name] += value

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, ()))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        """Get the latest value for a metric."""
        points = self._metrics.get(metric_name)
        return points[-1] if points else None

    def total(self, metric_name: str) -> float:
        """Sum of every value ever recorded (the counter value)."""
        return self._totals.get(metric_name, 0.0)

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """Aggregate statistics over the retained points."""
        points = self._metrics.get(metric_name, ())

        if not points:
            return {}

        values = [p.value for p in points]

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for observability engine."""
    enable_metrics: bool = True
    max_request_records: int = 1000
    max_metric_points: int = 1000

    def __post_init__(self):
        if self.max_request_records < 1:
            raise ValueError("max_request_records must be at least 1")
        if self.max_metric_points < 1:
            raise ValueError("max_metric_points must be at least 1")


class ObservabilityEngine:
    """
    Central observability handle shared by every layer of one client.

    ONLY observes: recording never raises into the caller's path
    and never changes what the caller returns.
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._requests = RequestLogCollector(self._config.max_request_records)
        self._metrics = (
            MetricsCollector(self._config.max_metric_points)
            if self._config.enable_metrics else None
        )

    @property
    def requests(self) -> RequestLogCollector:
        return self._requests

    @property
    def metrics(self) -> Optional[MetricsCollector]:
        return self._metrics

    def record_request(
        self,
        method: str,
        target: str,
        outcome: RequestOutcome,
        duration_ms: float,
        status: Optional[int] = None,
        detail: str = ""
    ) -> RequestRecord:
        record = self._requests.collect(
            method=method,
            target=target,
            outcome=outcome,
            duration_ms=duration_ms,
            status=status,
            detail=detail
        )
        if self._metrics:
            self._metrics.record("request_duration_ms", duration_ms, {"method": method})
        return record

    def count(self, metric_name: str, labels: Optional[Dict[str, str]] = None):
        if self._metrics:
            self._metrics.record(metric_name, 1.0, labels)


__all__ = [
    'RequestOutcome', 'RequestRecord', 'RequestLogCollector',
    'MetricType', 'MetricDefinition', 'MetricPoint', 'MetricsCollector',
    'ObservabilityConfig', 'ObservabilityEngine',
]
