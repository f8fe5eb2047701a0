from .model import CatalogRule, Entity, KindMatcher, LocationMatcher, LocationSpec, RuleDecision
from .enforcer import CatalogRulesEnforcer

__all__ = [
    "CatalogRule",
    "CatalogRulesEnforcer",
    "Entity",
    "KindMatcher",
    "LocationMatcher",
    "LocationSpec",
    "RuleDecision",
]
