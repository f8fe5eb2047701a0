from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict


class DecisionLogger:
    """Audit sink for admission decisions.

    Emits one record per sampled decision on the ``catalogrules.audit``
    logger. Denied decisions are always logged; allowed ones are sampled
    with ``sample_rate`` and can be switched off with ``log_allowed=False``.
    """

    def __init__(
        self,
        sample_rate: float = 1.0,
        level: int = logging.INFO,
        as_json: bool = False,
        *,
        logger_name: str = "catalogrules.audit",
        log_allowed: bool = True,
    ) -> None:
        self.sample_rate = max(0.0, min(1.0, float(sample_rate)))
        self.level = level
        self.as_json = as_json
        self.log_allowed = log_allowed
        self.logger = logging.getLogger(logger_name)

    def _should_log(self, payload: Dict[str, Any]) -> bool:
        if not payload.get("allowed", False):
            return True
        if not self.log_allowed:
            return False
        if self.sample_rate >= 1.0:
            return True
        return random.random() < self.sample_rate

    def log(self, payload: Dict[str, Any]) -> None:
        if not self._should_log(payload):
            return
        if self.as_json:
            msg = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str)
        else:
            entity = payload.get("entity") or {}
            location = payload.get("location") or {}
            msg = (
                f"catalog decision: {'allow' if payload.get('allowed') else 'deny'} "
                f"kind={entity.get('kind')} name={entity.get('name')} "
                f"location={location.get('type')}:{location.get('target')} "
                f"reason={payload.get('reason')} rule={payload.get('rule_index')}"
            )
        self.logger.log(self.level, msg)


__all__ = ["DecisionLogger"]
