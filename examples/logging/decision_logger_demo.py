#!/usr/bin/env python3
"""
DecisionLogger demo.

Run:
  python examples/logging/decision_logger_demo.py

Emits one JSON line per decision via the 'catalogrules.audit' logger, then
shows sampling of allowed decisions (denials are always logged).
"""

import logging

from catalogrules import CatalogRulesEnforcer, Entity, LocationSpec
from catalogrules.logging import DecisionLogger


def setup_logging() -> None:
    """Configure logging so 'catalogrules.audit' emits to stdout."""
    root = logging.getLogger()
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("%(name)s %(message)s"))
        root.addHandler(h)
    root.setLevel(logging.INFO)


RULES = [
    {"allow": [], "deny": [{"kind": "Group"}], "locations": [{"type": "github"}]},
]


def main() -> None:
    setup_logging()
    github = LocationSpec(type="github", target="https://github.com/acme/org/blob/main/groups.yaml")

    print("\n=== 1) Every decision as JSON ===")
    enforcer = CatalogRulesEnforcer(RULES, logger_sink=DecisionLogger(as_json=True))
    enforcer.is_allowed(Entity(kind="Group", name="admins"), github)
    enforcer.is_allowed(Entity(kind="Component", name="billing"), github)

    print("\n=== 2) Denials only ===")
    enforcer = CatalogRulesEnforcer(RULES, logger_sink=DecisionLogger(log_allowed=False))
    enforcer.is_allowed(Entity(kind="Group", name="admins"), github)
    enforcer.is_allowed(Entity(kind="Component", name="billing"), github)


if __name__ == "__main__":
    main()
