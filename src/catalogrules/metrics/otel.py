from __future__ import annotations

from typing import Any, Dict, Optional

from catalogrules.core.ports import MetricsSink

try:
    from opentelemetry.metrics import get_meter  # type: ignore
except Exception:  # pragma: no cover
    get_meter = None  # type: ignore


class OpenTelemetryMetrics(MetricsSink):
    """OpenTelemetry-based MetricsSink.

    Creates:
      - Counter: catalogrules_decisions_total (attributes: decision)
    """

    _counter: Optional[Any]

    def __init__(self) -> None:
        self._counter = None

        if get_meter is None:  # pragma: no cover
            return

        meter = get_meter("catalogrules.metrics")
        try:
            self._counter = meter.create_counter(  # type: ignore[attr-defined]
                name="catalogrules_decisions_total",
                description="Total catalog admission decisions by outcome.",
            )
        except Exception:  # pragma: no cover
            self._counter = None

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.add(1, {"decision": decision})  # type: ignore[attr-defined]
        except Exception:  # pragma: no cover
            pass
