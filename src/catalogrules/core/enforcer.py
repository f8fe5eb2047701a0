from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from ..store.rules_loader import rule_from_mapping, rules_from_config
from .model import CatalogRule, RuleDecision
from .ports import DecisionLogSink, MetricsSink

logger = logging.getLogger("catalogrules.enforcer")

RuleLike = Union[CatalogRule, Mapping[str, Any]]


class CatalogRulesEnforcer:
    """Decides whether an entity read from a location may enter the catalog.

    Rule sets are folded left to right. A rule set whose ``locations`` do not
    match the location is skipped; otherwise its own verdict replaces the
    running one:

      - denied if any ``deny`` matcher matches the entity kind,
      - allowed if ``allow`` is empty or any ``allow`` matcher matches,
      - denied otherwise.

    With no rule sets at all, everything is allowed. The running verdict also
    starts out allowed, so an entity that no rule set applies to is accepted.

    The instance is immutable after construction and safe to share between
    threads.
    """

    def __init__(
        self,
        rules: Iterable[RuleLike] = (),
        *,
        logger_sink: Optional[DecisionLogSink] = None,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self._rules: Tuple[CatalogRule, ...] = tuple(
            r if isinstance(r, CatalogRule) else rule_from_mapping(r, path=f"/{i}")
            for i, r in enumerate(rules)
        )
        self._logger_sink = logger_sink
        self._metrics = metrics

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **kwargs: Any) -> "CatalogRulesEnforcer":
        """Build an enforcer from an app-config mapping (``catalog.rules``)."""
        catalog = config.get("catalog") if isinstance(config, Mapping) else None
        if not isinstance(catalog, Mapping) or catalog.get("rules") is None:
            return cls((), **kwargs)
        return cls(rules_from_config(config), **kwargs)

    @property
    def rules(self) -> Tuple[CatalogRule, ...]:
        return self._rules

    # ------------------------------------------------------------------ #

    def is_allowed(self, entity: Any, location: Any) -> bool:
        return self.evaluate(entity, location).allowed

    def evaluate(self, entity: Any, location: Any) -> RuleDecision:
        decision = self._decide(entity, location)
        self._report(entity, location, decision)
        return decision

    def _decide(self, entity: Any, location: Any) -> RuleDecision:
        if not self._rules:
            return RuleDecision(allowed=True, reason="no-rules")

        decision = RuleDecision(allowed=True, reason="no-applicable-rule")
        for index, rule in enumerate(self._rules):
            if not rule.applies_to(location):
                continue
            if rule.is_denied(entity):
                decision = RuleDecision(allowed=False, reason="denied", rule_index=index)
            elif rule.is_allowed(entity):
                decision = RuleDecision(allowed=True, reason="allowed", rule_index=index)
            else:
                decision = RuleDecision(
                    allowed=False, reason="not-in-allow-list", rule_index=index
                )
        return decision

    def _report(self, entity: Any, location: Any, decision: RuleDecision) -> None:
        if self._logger_sink is not None:
            payload: Dict[str, Any] = {
                "entity": {
                    "kind": getattr(entity, "kind", None),
                    "name": getattr(entity, "name", None),
                },
                "location": {
                    "type": getattr(location, "type", None),
                    "target": getattr(location, "target", None),
                },
                "allowed": decision.allowed,
                "reason": decision.reason,
                "rule_index": decision.rule_index,
            }
            try:
                self._logger_sink.log(payload)
            except Exception:
                logger.debug("decision logger sink failed", exc_info=True)

        if self._metrics is not None:
            try:
                self._metrics.inc(
                    "catalogrules_decisions_total",
                    {"decision": "allow" if decision.allowed else "deny"},
                )
            except Exception:
                logger.debug("metrics sink failed", exc_info=True)


__all__ = ["CatalogRulesEnforcer"]
