from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from ..core.model import CatalogRule
from ..store.rules_loader import rules_from_config

Issue = Dict[str, Any]


def _issue(code: str, message: str, rule_index: int, **extra: Any) -> Issue:
    out: Issue = {"code": code, "message": message, "rule_index": rule_index}
    out.update(extra)
    return out


def _duplicates(values: Sequence[str]) -> List[str]:
    seen: set[str] = set()
    dups: List[str] = []
    for v in values:
        key = v.lower()
        if key in seen and key not in dups:
            dups.append(key)
        seen.add(key)
    return dups


def _location_keys(rule: CatalogRule) -> set[str]:
    return {m.type.lower() for m in rule.locations}


def _covers(later: CatalogRule, earlier: CatalogRule) -> bool:
    # ``later`` applies to every location ``earlier`` applies to
    if not later.locations:
        return True
    if not earlier.locations:
        return False
    return _location_keys(earlier) <= _location_keys(later)


def analyze_rules(doc: Any) -> List[Issue]:
    """Static checks over a rules document.

    Accepts anything :func:`rules_from_config` accepts (or a sequence of
    :class:`CatalogRule`) and returns a list of issue dicts with ``code``,
    ``message`` and ``rule_index``.
    """
    if isinstance(doc, (list, tuple)) and all(isinstance(r, CatalogRule) for r in doc):
        rules: Sequence[CatalogRule] = tuple(doc)
        raw: Sequence[Any] = ()
    else:
        rules = rules_from_config(doc)
        raw = _raw_rules(doc)

    issues: List[Issue] = []
    for i, rule in enumerate(rules):
        allow = [m.kind for m in rule.allow]
        deny = [m.kind for m in rule.deny]

        for field, values in (("allow", allow), ("deny", deny)):
            for kind in _duplicates(values):
                issues.append(
                    _issue("DUPLICATE_KIND", f"kind '{kind}' listed more than once in '{field}'", i, field=field, kind=kind)
                )
        for loc in _duplicates([m.type for m in rule.locations]):
            issues.append(_issue("DUPLICATE_LOCATION", f"location type '{loc}' listed more than once", i, type=loc))

        denied = {k.lower() for k in deny}
        overlap = sorted({k.lower() for k in allow} & denied)
        for kind in overlap:
            issues.append(
                _issue("ALLOW_DENY_OVERLAP", f"kind '{kind}' is both allowed and denied; deny wins", i, kind=kind)
            )
        if allow and all(k.lower() in denied for k in allow):
            issues.append(_issue("ALLOW_NOTHING", "every allowed kind is also denied; rule set allows nothing", i))

        if i < len(raw) and isinstance(raw[i], Mapping) and raw[i].get("locations") == []:
            issues.append(_issue("EMPTY_LOCATIONS", "empty 'locations' applies the rule set to every location", i))

        for j in range(i + 1, len(rules)):
            if _covers(rules[j], rule):
                issues.append(
                    _issue(
                        "SHADOWED_RULE",
                        f"rule set is always overridden by rule set {j}",
                        i,
                        shadowed_by=j,
                    )
                )
                break

    return issues


def _raw_rules(doc: Any) -> Sequence[Any]:
    if isinstance(doc, (list, tuple)):
        return doc
    if isinstance(doc, Mapping):
        if isinstance(doc.get("catalog"), Mapping):
            rules = doc["catalog"].get("rules")
        else:
            rules = doc.get("rules")
        if isinstance(rules, list):
            return rules
    return ()


__all__ = ["analyze_rules"]
