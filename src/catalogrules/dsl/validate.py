from __future__ import annotations

from typing import Any, Dict

_MATCHER_LIST = {
    "kind": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["kind"],
            "properties": {"kind": {"type": "string", "minLength": 1}},
            "additionalProperties": False,
        },
    },
    "type": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["type"],
            "properties": {"type": {"type": "string", "minLength": 1}},
            "additionalProperties": False,
        },
    },
}

RULES_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "catalogrules rules document",
    "$defs": {
        "ruleSet": {
            "type": "object",
            "properties": {
                "allow": _MATCHER_LIST["kind"],
                "deny": _MATCHER_LIST["kind"],
                "locations": _MATCHER_LIST["type"],
            },
            "additionalProperties": False,
        },
        "ruleList": {"type": "array", "items": {"$ref": "#/$defs/ruleSet"}},
    },
    "anyOf": [
        {"$ref": "#/$defs/ruleList"},
        {
            "type": "object",
            "required": ["rules"],
            "properties": {"rules": {"$ref": "#/$defs/ruleList"}},
        },
        {
            "type": "object",
            "required": ["catalog"],
            "properties": {
                "catalog": {
                    "type": "object",
                    "properties": {"rules": {"$ref": "#/$defs/ruleList"}},
                }
            },
        },
    ],
}


def validate_rules(doc: Any) -> None:
    """Validate a rules document against :data:`RULES_SCHEMA`.

    Raises RuntimeError when jsonschema is not installed and
    ``jsonschema.ValidationError`` when the document does not conform.
    """
    try:
        import jsonschema  # type: ignore[import-untyped]
    except Exception as e:
        raise RuntimeError(
            "Install catalogrules[validate] to enable schema validation"
        ) from e
    jsonschema.validate(doc, RULES_SCHEMA)


__all__ = ["RULES_SCHEMA", "validate_rules"]
