from __future__ import annotations

from typing import Any, Dict, Optional

from catalogrules.core.ports import MetricsSink

try:
    from prometheus_client import Counter  # type: ignore
except Exception:  # pragma: no cover
    Counter = None  # type: ignore


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - <namespace>_decisions_total{decision="allow|deny"}
    """

    _counter: Optional[Any]

    def __init__(self, namespace: str = "catalogrules", registry: Any | None = None) -> None:
        self._counter = None

        if Counter is None:  # pragma: no cover
            return

        kwargs: Dict[str, Any] = {"labelnames": ("decision",)}
        if registry is not None:
            kwargs["registry"] = registry
        self._counter = Counter(
            f"{namespace}_decisions_total",
            "Total catalog admission decisions by outcome.",
            **kwargs,
        )

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment the decisions counter.

        *name* is ignored; this sink always increments `<namespace>_decisions_total`.
        """
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.labels(decision=decision).inc()  # type: ignore[call-arg]
        except Exception:  # pragma: no cover
            # never raise from metrics path
            pass
