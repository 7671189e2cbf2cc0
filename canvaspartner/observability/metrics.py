"""Prometheus metrics for canvaspartner.

Turn outcomes, model rounds, tool calls and latency. Exposed by the
/metrics route.
"""

from prometheus_client import Counter, Histogram

TURNS = Counter(
    "canvaspartner_turns_total",
    "Chat turns processed",
    labelnames=["outcome"],
)

TURN_LATENCY = Histogram(
    "canvaspartner_turn_latency_seconds",
    "Wall-clock duration of a chat turn",
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0, 80.0),
)

MODEL_ROUNDS = Histogram(
    "canvaspartner_model_rounds",
    "Model invocations per chat turn",
    buckets=(1, 2, 3, 4, 5, 6, 8, 10, 15, 20),
)

TOOL_CALLS = Counter(
    "canvaspartner_tool_calls_total",
    "Tool executions by tool and result status",
    labelnames=["tool", "status"],
)

HISTORY_ROWS_SKIPPED = Counter(
    "canvaspartner_history_rows_skipped_total",
    "Persisted messages excluded from model replay",
    labelnames=["reason"],
)

PROVIDER_ERRORS = Counter(
    "canvaspartner_provider_errors_total",
    "Model provider failures that aborted a turn",
    labelnames=["error_type"],
)
