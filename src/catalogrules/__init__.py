from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import core, dsl, store
from .core.enforcer import CatalogRulesEnforcer
from .core.model import CatalogRule, Entity, KindMatcher, LocationMatcher, LocationSpec, RuleDecision
from .store import RulesConfigError, load_rules, rules_from_config


def _detect_version() -> str:
    try:
        return version("catalogrules")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "CatalogRulesEnforcer",
    "CatalogRule",
    "Entity",
    "KindMatcher",
    "LocationMatcher",
    "LocationSpec",
    "RuleDecision",
    "RulesConfigError",
    "load_rules",
    "rules_from_config",
    "core",
    "dsl",
    "store",
    "__version__",
]
