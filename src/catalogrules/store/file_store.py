from __future__ import annotations

import logging
from typing import Any, Tuple

from ..core.model import CatalogRule
from ..core.ports import RuleSource
from .rules_loader import parse_rules_text, rules_from_config

logger = logging.getLogger("catalogrules.store")


class FileRuleSource(RuleSource):
    """Rule source backed by a local JSON or YAML file.

    The format is picked from the file extension; files with any other
    extension are parsed as JSON first and YAML second.
    """

    def __init__(self, path: str, *, validate_schema: bool = False) -> None:
        self.path = path
        self.validate_schema = validate_schema

    def load(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read()
        doc = parse_rules_text(text, filename=self.path)

        if self.validate_schema:
            try:
                from catalogrules.dsl.validate import validate_rules

                validate_rules(doc)
            except Exception as e:
                logger.exception("catalogrules: rules validation failed for %s", self.path, exc_info=e)
                raise

        return doc

    def load_rules(self) -> Tuple[CatalogRule, ...]:
        return rules_from_config(self.load())


def load_rules(path: str, *, validate_schema: bool = False) -> Tuple[CatalogRule, ...]:
    """Read ``path`` and return its rule sets in order."""
    rules = FileRuleSource(path, validate_schema=validate_schema).load_rules()
    logger.info("catalogrules: loaded %d rule set(s) from %s", len(rules), path)
    return rules


__all__ = ["FileRuleSource", "load_rules"]
