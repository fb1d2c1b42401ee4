"""Monitoring instrumentation for failsafe.

Exports Prometheus counters describing attempts, classified failures and
execution results.
"""

from failsafe.monitoring.metrics import (
    attempts_total,
    executions_total,
    failures_total,
)

__all__ = [
    "attempts_total",
    "failures_total",
    "executions_total",
]
