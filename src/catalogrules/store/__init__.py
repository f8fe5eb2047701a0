from __future__ import annotations

from .file_store import FileRuleSource, load_rules
from .rules_loader import RulesConfigError, parse_rules_text, rule_from_mapping, rules_from_config

__all__ = [
    "FileRuleSource",
    "load_rules",
    "RulesConfigError",
    "parse_rules_text",
    "rule_from_mapping",
    "rules_from_config",
]
