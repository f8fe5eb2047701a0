import importlib
import sys
import types

from catalogrules.core.enforcer import CatalogRulesEnforcer
from catalogrules.core.model import Entity, LocationSpec


def _install_fake_prometheus(monkeypatch):
    created = []

    class _Lbl:
        def __init__(self, obj, labels):
            self._obj = obj
            self._labels = labels

        def inc(self, *args, **kwargs):
            self._obj.counts[self._labels["decision"]] = self._obj.counts.get(self._labels["decision"], 0) + 1

    class Cnt:
        def __init__(self, name, doc, labelnames=None, registry=None):
            self.name, self.doc = name, doc
            self.labelnames = tuple(labelnames or [])
            self.registry = registry
            self.counts = {}
            created.append(self)

        def labels(self, **kw):
            return _Lbl(self, kw)

    fake = types.ModuleType("prometheus_client")
    fake.Counter = Cnt
    monkeypatch.setitem(sys.modules, "prometheus_client", fake)
    import catalogrules.metrics.prometheus as mod

    importlib.reload(mod)
    return mod, created


def _install_fake_otel(monkeypatch):
    counters = []

    class _Counter:
        def __init__(self, name):
            self.name = name
            self.adds = []

        def add(self, v, attributes=None):
            self.adds.append((v, attributes))

    class _Meter:
        def create_counter(self, name, **kw):
            c = _Counter(name)
            counters.append(c)
            return c

    def get_meter(*args, **kwargs):
        return _Meter()

    fake = types.ModuleType("opentelemetry.metrics")
    fake.get_meter = get_meter
    monkeypatch.setitem(sys.modules, "opentelemetry.metrics", fake)
    import catalogrules.metrics.otel as mod

    importlib.reload(mod)
    return mod, counters


def test_prometheus_counter_by_decision(monkeypatch):
    mod, created = _install_fake_prometheus(monkeypatch)
    registry = object()
    m = mod.PrometheusMetrics(namespace="ingest", registry=registry)
    (counter,) = created
    assert counter.name == "ingest_decisions_total"
    assert counter.labelnames == ("decision",)
    assert counter.registry is registry

    enforcer = CatalogRulesEnforcer([{"deny": [{"kind": "Group"}]}], metrics=m)
    loc = LocationSpec(type="file", target="/x")
    enforcer.is_allowed(Entity(kind="Group"), loc)
    enforcer.is_allowed(Entity(kind="User"), loc)
    enforcer.is_allowed(Entity(kind="User"), loc)
    assert counter.counts == {"deny": 1, "allow": 2}


def test_prometheus_unknown_label(monkeypatch):
    mod, created = _install_fake_prometheus(monkeypatch)
    m = mod.PrometheusMetrics()
    m.inc("ignored")
    assert created[0].counts == {"unknown": 1}


def test_otel_counter_by_decision(monkeypatch):
    mod, counters = _install_fake_otel(monkeypatch)
    m = mod.OpenTelemetryMetrics()
    m.inc("catalogrules_decisions_total", {"decision": "allow"})
    (counter,) = counters
    assert counter.name == "catalogrules_decisions_total"
    assert counter.adds == [(1, {"decision": "allow"})]
