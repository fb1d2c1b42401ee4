"""Prometheus metrics for failsafe executions.

Counters are registered on the default registry; applications expose them
however they already expose prometheus_client metrics. Updates are skipped
entirely when ``METRICS_ENABLED`` is false.

Useful alert signals:
- failures_total with outcome="unhandled" (a failure category nobody planned for)
- executions_total with result="propagated" (handlers giving up)
- attempts_total growing faster than executions_total (retry storms)
"""

from prometheus_client import Counter

# === Attempt Metrics ===

attempts_total = Counter(
    "failsafe_attempts_total",
    "Total invocations of protected operations",
)
"""
Protected operation invocations, counting every retry.

Ratio attempts_total / executions_total is the mean attempts per execution.
"""

# === Failure Metrics ===

failures_total = Counter(
    "failsafe_failures_total",
    "Total failures classified by the resolution engine",
    ["category", "outcome"],
)
"""
Failures by exception class name and resolved outcome.

Labels:
- category: class name of the raised exception (e.g. TimeoutError)
- outcome: continue, stop, propagate, unhandled
"""

# === Execution Metrics ===

executions_total = Counter(
    "failsafe_executions_total",
    "Total completed executions by result",
    ["result"],
)
"""
Completed executions.

Labels:
- result: succeeded, absorbed (a handler resolved STOP), propagated
"""
