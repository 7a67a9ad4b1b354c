"""
Prometheus метрики для мониторинга проверок.
"""

from prometheus_client import Counter, Gauge, Histogram

# Запуски checker'ов
check_runs = Counter(
    "marvin_check_runs_total",
    "Checker runs by outcome",
    ["checker", "outcome"]
)

check_duration = Histogram(
    "marvin_check_duration_seconds",
    "Checker wall-clock duration",
    ["checker"],
    buckets=[0.5, 1, 2, 5, 10, 30, 60, 120]
)

issues_found = Counter(
    "marvin_issues_found_total",
    "Issues reported by checkers",
    ["checker", "severity"]
)

# Хранилище
corrupt_records = Gauge(
    "marvin_store_corrupt_records",
    "Unreadable result files seen by the last listing"
)
