from __future__ import annotations

import json
import logging
from typing import Any, Literal, Mapping, Optional, Tuple

from ..core.model import CatalogRule, KindMatcher, LocationMatcher

logger = logging.getLogger("catalogrules.store")


class RulesConfigError(ValueError):
    """A rules document does not have the expected shape.

    ``path`` points at the offending element, e.g. ``/1/deny/0/kind``.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


# --------------------------------------------------------------------------- #
# Text parsing
# --------------------------------------------------------------------------- #


def _detect_format(
    filename: Optional[str], content_type: Optional[str]
) -> Literal["json", "yaml", "unknown"]:
    if content_type:
        ct = content_type.lower()
        if "yaml" in ct or "yml" in ct:
            return "yaml"
        if "json" in ct:
            return "json"
    if filename:
        name = filename.lower()
        if name.endswith((".yaml", ".yml")):
            return "yaml"
        if name.endswith(".json"):
            return "json"
    return "unknown"


def _load_yaml(text: str) -> Any:
    try:
        import yaml  # type: ignore[import-untyped]
    except Exception as e:
        raise ImportError(
            "YAML rules require PyYAML. Install with: pip install catalogrules[yaml]"
        ) from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RulesConfigError(f"invalid YAML: {e}") from e


def parse_rules_text(
    text: str, *, filename: Optional[str] = None, content_type: Optional[str] = None
) -> Any:
    """Parse a rules document as JSON or YAML.

    The format comes from ``content_type`` first, then the ``filename``
    extension. Without hints JSON is tried first and YAML second.
    """
    fmt = _detect_format(filename, content_type)
    if fmt == "json":
        return json.loads(text)
    if fmt == "yaml":
        return _load_yaml(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.debug("rules text is not JSON, trying YAML")
        return _load_yaml(text)


# --------------------------------------------------------------------------- #
# Document -> rule sets
# --------------------------------------------------------------------------- #


def _matchers(value: Any, field: str, path: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise RulesConfigError(f"'{field}' must be a list", path)
    out: list[str] = []
    for i, item in enumerate(value):
        item_path = f"{path}/{i}"
        if not isinstance(item, Mapping):
            raise RulesConfigError(f"expected an object with '{field}'", item_path)
        raw = item.get(field)
        if not isinstance(raw, str):
            raise RulesConfigError(f"'{field}' must be a string", f"{item_path}/{field}")
        out.append(raw)
    return out


def rule_from_mapping(data: Any, *, path: str = "") -> CatalogRule:
    """Build a :class:`CatalogRule` from ``{"allow": [...], "deny": [...], "locations": [...]}``."""
    if not isinstance(data, Mapping):
        raise RulesConfigError("rule set must be an object", path)
    allow = _matchers(data.get("allow"), "kind", f"{path}/allow")
    deny = _matchers(data.get("deny"), "kind", f"{path}/deny")
    locations = _matchers(data.get("locations"), "type", f"{path}/locations")
    return CatalogRule(
        allow=tuple(KindMatcher(k) for k in allow),
        deny=tuple(KindMatcher(k) for k in deny),
        locations=tuple(LocationMatcher(t) for t in locations),
    )


def _rules_list(doc: Any) -> Tuple[Any, str]:
    if isinstance(doc, (list, tuple)):
        return doc, ""
    if isinstance(doc, Mapping):
        if "catalog" in doc:
            catalog = doc["catalog"]
            if not isinstance(catalog, Mapping):
                raise RulesConfigError("'catalog' must be an object", "/catalog")
            rules = catalog.get("rules")
            return rules if rules is not None else [], "/catalog/rules"
        if "rules" in doc:
            return doc["rules"] if doc["rules"] is not None else [], "/rules"
    raise RulesConfigError("expected a list of rule sets, {'rules': [...]} or {'catalog': {'rules': [...]}}")


def rules_from_config(doc: Any) -> Tuple[CatalogRule, ...]:
    """Convert a parsed rules document into an ordered tuple of rule sets."""
    rules, base = _rules_list(doc)
    if not isinstance(rules, (list, tuple)):
        raise RulesConfigError("rules must be a list", base)
    return tuple(rule_from_mapping(r, path=f"{base}/{i}") for i, r in enumerate(rules))


__all__ = [
    "RulesConfigError",
    "parse_rules_text",
    "rule_from_mapping",
    "rules_from_config",
]
