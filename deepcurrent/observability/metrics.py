"""Prometheus metrics for DeepCurrent.

Covers episode throughput and latency, stream events, strategy
evolution decisions and the background analysis queue.
"""

from prometheus_client import Counter, Gauge, Histogram

# Episode metrics
EPISODE_COUNT = Counter(
    "deepcurrent_episodes_total",
    "Episodes that reached a terminal status",
    labelnames=["status"],
)

EPISODE_LATENCY = Histogram(
    "deepcurrent_episode_latency_seconds",
    "Time from episode start to terminal status",
    labelnames=["status"],
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

ACTIVE_EPISODES = Gauge(
    "deepcurrent_active_episodes",
    "Episodes currently streaming",
)

STREAM_EVENTS = Counter(
    "deepcurrent_stream_events_total",
    "Canonical events emitted on episode streams",
    labelnames=["event_type"],
)

# Evolution metrics
EVOLUTION_DECISIONS = Counter(
    "deepcurrent_evolution_decisions_total",
    "Evolution decisions taken after episode analysis",
    labelnames=["outcome"],
)

STRATEGY_VERSIONS_CREATED = Counter(
    "deepcurrent_strategy_versions_created_total",
    "Strategy versions created",
    labelnames=["status"],
)

# Analysis queue metrics
ANALYSIS_QUEUE_DEPTH = Gauge(
    "deepcurrent_analysis_queue_depth",
    "Episodes waiting for post-episode analysis",
)

ANALYSIS_FAILURES = Counter(
    "deepcurrent_analysis_failures_total",
    "Post-episode analysis runs that raised",
    labelnames=["error_type"],
)
