"""In-memory counters exposed in Prometheus text format at /metrics."""

from typing import Dict

COUNTERS: Dict[str, str] = {
    "orders_created_total": "Total number of orders created",
    "order_items_changed_total": "Total number of order item quantity changes applied",
    "customers_registered_total": "Total number of customers registered",
    "products_created_total": "Total number of products created",
    "validation_errors_total": "Total number of requests rejected by domain validation",
}


class MetricsCollector:
    """Simple in-memory counter set."""

    def __init__(self):
        self._counters: Dict[str, int] = {name: 0 for name in COUNTERS}

    def increment(self, metric_name: str, value: int = 1) -> None:
        """Increment a known counter; unknown names are ignored."""
        if metric_name in self._counters:
            self._counters[metric_name] += value

    def get(self, metric_name: str) -> int:
        return self._counters.get(metric_name, 0)

    def reset(self) -> None:
        for name in self._counters:
            self._counters[name] = 0

    def get_prometheus_text(self) -> str:
        lines = []
        for name, help_text in COUNTERS.items():
            lines.append(f"# HELP {name} {help_text}")
            lines.append(f"# TYPE {name} counter")
            lines.append(f"{name} {self._counters[name]}")
            lines.append("")
        return "\n".join(lines)


# Global metrics instance
metrics = MetricsCollector()
