from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict

LOGGER_NAME = "funding_assistant"

# (metric name, snapshot key, type, help)
PROMETHEUS_SERIES = (
    ("funding_api_calls_total", "calls", "counter", "Total number of calls to the funding data service"),
    ("funding_api_errors_total", "errors", "counter", "Total number of failed calls to the funding data service"),
    ("funding_api_avg_latency_ms", "avg_latency_ms", "gauge", "Average latency of funding data service calls in milliseconds"),
)


class StructuredFormatter(logging.Formatter):
    """Formatter that fills in missing structured fields."""

    FIELDS = ("operation", "status", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        for name in self.FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "")
        return super().format(record)


def setup_logger(level_name: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logger.setLevel(level)
    # stderr: stdout carries the protocol stream when running over stdio
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","operation":"%(operation)s",'
        '"status":"%(status)s","duration_ms":"%(duration_ms)s","msg":"%(message)s"}'
    ))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


@dataclass
class OperationMetrics:
    calls: int = 0
    errors: int = 0
    total_latency_ms: float = 0.0

    def observe(self, duration_ms: float, error: bool) -> None:
        self.calls += 1
        self.total_latency_ms += float(duration_ms)
        if error:
            self.errors += 1

    @property
    def avg_latency_ms(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_latency_ms / self.calls


class InMemoryMetrics:
    """Per-operation counters for calls to the funding data service."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._operations: Dict[str, OperationMetrics] = {}

    def record(self, operation: str, duration_ms: float, error: bool) -> None:
        with self._lock:
            metrics = self._operations.get(operation)
            if metrics is None:
                metrics = OperationMetrics()
                self._operations[operation] = metrics
            metrics.observe(duration_ms, error)

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {
                name: {
                    "calls": float(m.calls),
                    "errors": float(m.errors),
                    "avg_latency_ms": float(m.avg_latency_ms),
                }
                for name, m in self._operations.items()
            }

    def to_prometheus(self) -> str:
        lines = [
            "# HELP funding_assistant_healthy Funding assistant health status",
            "# TYPE funding_assistant_healthy gauge",
            "funding_assistant_healthy 1",
        ]
        snapshot = sorted(self.snapshot().items())
        for metric, key, kind, help_text in PROMETHEUS_SERIES:
            if not snapshot:
                break
            lines.append(f"# HELP {metric} {help_text}")
            lines.append(f"# TYPE {metric} {kind}")
            for operation, values in snapshot:
                lines.append(f'{metric}{{operation="{operation}"}} {values[key]}')
        return "\n".join(lines) + "\n"
