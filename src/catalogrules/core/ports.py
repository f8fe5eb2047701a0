from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class DecisionLogSink(Protocol):
    def log(self, payload: Dict[str, Any]) -> None: ...


@runtime_checkable
class MetricsSink(Protocol):
    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None: ...


@runtime_checkable
class RuleSource(Protocol):
    def load(self) -> Any: ...


__all__ = ["DecisionLogSink", "MetricsSink", "RuleSource"]
