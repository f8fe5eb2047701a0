from .lint import analyze_rules
from .validate import RULES_SCHEMA, validate_rules

__all__ = ["analyze_rules", "RULES_SCHEMA", "validate_rules"]
