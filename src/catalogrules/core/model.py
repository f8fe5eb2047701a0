from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Entity:
    kind: str
    name: Optional[str] = None
    namespace: Optional[str] = None


@dataclass(frozen=True)
class LocationSpec:
    type: str
    target: str = ""


@dataclass(frozen=True)
class KindMatcher:
    """Matches an entity whose kind equals ``kind``, ignoring case."""

    kind: str

    def matches(self, entity: object) -> bool:
        other = getattr(entity, "kind", None)
        if not isinstance(other, str) or not isinstance(self.kind, str):
            return False
        return other.lower() == self.kind.lower()


@dataclass(frozen=True)
class LocationMatcher:
    """Matches a location whose type equals ``type``, ignoring case."""

    type: str

    def matches(self, location: object) -> bool:
        other = getattr(location, "type", None)
        if not isinstance(other, str) or not isinstance(self.type, str):
            return False
        return other.lower() == self.type.lower()


@dataclass(frozen=True)
class CatalogRule:
    """One rule set.

    ``allow`` empty means every kind is allowed; ``deny`` empty denies nothing;
    ``locations`` empty means the rule set applies to every location.
    """

    allow: Tuple[KindMatcher, ...] = ()
    deny: Tuple[KindMatcher, ...] = ()
    locations: Tuple[LocationMatcher, ...] = ()

    def applies_to(self, location: object) -> bool:
        if not self.locations:
            return True
        return any(m.matches(location) for m in self.locations)

    def is_denied(self, entity: object) -> bool:
        return any(m.matches(entity) for m in self.deny)

    def is_allowed(self, entity: object) -> bool:
        if not self.allow:
            return True
        return any(m.matches(entity) for m in self.allow)


@dataclass(frozen=True)
class RuleDecision:
    allowed: bool
    reason: str
    rule_index: Optional[int] = None


__all__ = [
    "Entity",
    "LocationSpec",
    "KindMatcher",
    "LocationMatcher",
    "CatalogRule",
    "RuleDecision",
]
