from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .core.enforcer import CatalogRulesEnforcer
from .core.model import Entity, LocationSpec
from .dsl.lint import analyze_rules
from .dsl.validate import validate_rules
from .store.rules_loader import RulesConfigError, parse_rules_text, rules_from_config

EXIT_OK = 0
EXIT_SCHEMA_ERRORS = 2
EXIT_LINT_ERRORS = 3
EXIT_DENIED = 4
EXIT_ENV = 5
EXIT_CONFIG = 6


def _read_doc(path: Optional[str]) -> Any:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        return parse_rules_text(text, filename=path)
    return parse_rules_text(sys.stdin.read())


def _print(payload: Any, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, ensure_ascii=False, indent=2 if isinstance(payload, dict) else None))
        return
    if isinstance(payload, str):
        sys.stdout.write(payload if payload.endswith("\n") else payload + "\n")
        return
    if isinstance(payload, list):
        for item in payload:
            if isinstance(item, dict):
                where = item.get("rule_index", item.get("path", ""))
                code = item.get("code", "ERROR")
                print(f"{code} [{where}]: {item.get('message', '')}")
            else:
                print(str(item))
        return
    print(str(payload))


def _schema_errors(doc: Any) -> List[Dict[str, Any]]:
    try:
        validate_rules(doc)
    except RuntimeError:
        raise
    except Exception as e:
        path = getattr(e, "absolute_path", None) or getattr(e, "path", None) or ()
        pointer = "/" + "/".join(str(p) for p in path) if path else ""
        return [{"code": "SCHEMA", "message": getattr(e, "message", str(e)), "path": pointer}]
    return []


def _load_or_report(ns: argparse.Namespace) -> tuple[Any, Optional[int]]:
    fmt = getattr(ns, "format", "text")
    try:
        return _read_doc(getattr(ns, "rules", None)), None
    except FileNotFoundError as e:
        _print(f"rules file not found: {e.filename}", "text")
        return None, EXIT_CONFIG
    except OSError as e:
        _print(f"cannot read rules file: {e}", "text")
        return None, EXIT_CONFIG
    except ImportError as e:
        _print(str(e), "text")
        return None, EXIT_ENV
    except ValueError as e:
        _print([{"code": "PARSE", "message": str(e)}], fmt)
        return None, EXIT_CONFIG


def cmd_validate(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "text")
    doc, rc = _load_or_report(ns)
    if rc is not None:
        return rc
    try:
        errors = _schema_errors(doc)
    except RuntimeError as e:
        _print(str(e), "text")
        return EXIT_ENV
    if fmt == "json":
        _print(errors, "json")
    else:
        _print(errors if errors else "OK", "text")
    return EXIT_SCHEMA_ERRORS if errors else EXIT_OK


def cmd_lint(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "json")
    doc, rc = _load_or_report(ns)
    if rc is not None:
        return rc
    try:
        issues = analyze_rules(doc)
    except RulesConfigError as e:
        _print([{"code": "CONFIG", "message": str(e), "path": e.path}], fmt)
        return EXIT_CONFIG
    if fmt == "json":
        _print(issues, "json")
    else:
        _print(issues if issues else "OK", "text")
    if issues and getattr(ns, "strict", False):
        return EXIT_LINT_ERRORS
    return EXIT_OK


def cmd_check(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "json")
    doc, rc = _load_or_report(ns)
    if rc is not None:
        return rc
    try:
        errors = _schema_errors(doc)
    except RuntimeError as e:
        _print(str(e), "text")
        return EXIT_ENV
    if errors:
        _print(errors, fmt)
        return EXIT_SCHEMA_ERRORS

    try:
        issues = analyze_rules(doc)
    except RulesConfigError as e:
        _print([{"code": "CONFIG", "message": str(e), "path": e.path}], fmt)
        return EXIT_CONFIG
    _print(issues if (issues or fmt == "json") else "OK", fmt)
    if issues and getattr(ns, "strict", False):
        return EXIT_LINT_ERRORS
    return EXIT_OK


def cmd_eval(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "text")
    doc, rc = _load_or_report(ns)
    if rc is not None:
        return rc
    try:
        enforcer = CatalogRulesEnforcer(rules_from_config(doc))
    except RulesConfigError as e:
        _print([{"code": "CONFIG", "message": str(e), "path": e.path}], fmt)
        return EXIT_CONFIG

    entity = Entity(kind=ns.kind)
    location = LocationSpec(type=ns.location_type, target=getattr(ns, "target", None) or "")
    decision = enforcer.evaluate(entity, location)
    if fmt == "json":
        _print(
            {
                "allowed": decision.allowed,
                "reason": decision.reason,
                "rule_index": decision.rule_index,
            },
            "json",
        )
    else:
        verdict = "ALLOW" if decision.allowed else "DENY"
        where = "" if decision.rule_index is None else f" (rule set {decision.rule_index})"
        _print(f"{verdict}: {decision.reason}{where}", "text")
    return EXIT_OK if decision.allowed else EXIT_DENIED


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="catalogrules", description="Catalog admission rules tools")
    p.add_argument("--version", action="store_true", help="print version and exit")
    sub = p.add_subparsers(dest="cmd")

    def _common(sp: argparse.ArgumentParser, default_fmt: str) -> None:
        sp.add_argument("--rules", help="rules file (JSON or YAML); stdin when omitted")
        sp.add_argument("--format", choices=("json", "text"), default=default_fmt)

    v = sub.add_parser("validate", help="validate rules against the JSON schema")
    _common(v, "text")
    v.set_defaults(func=cmd_validate)

    lint = sub.add_parser("lint", help="report suspicious rule sets")
    _common(lint, "json")
    lint.add_argument("--strict", action="store_true", help="non-zero exit code when issues are found")
    lint.set_defaults(func=cmd_lint)

    c = sub.add_parser("check", help="validate, then lint")
    _common(c, "json")
    c.add_argument("--strict", action="store_true", help="non-zero exit code when lint issues are found")
    c.set_defaults(func=cmd_check)

    e = sub.add_parser("eval", help="decide whether an entity kind is admitted from a location type")
    _common(e, "text")
    e.add_argument("--kind", required=True)
    e.add_argument("--location-type", dest="location_type", required=True)
    e.add_argument("--target", default="")
    e.set_defaults(func=cmd_eval)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)

    if ns.version:
        print(f"catalogrules {__version__}")
        return EXIT_OK
    func = getattr(ns, "func", None)
    if func is None:
        parser.print_usage()
        return EXIT_OK

    rc = func(ns)
    return rc if isinstance(rc, int) else EXIT_OK


def entrypoint() -> None:  # pragma: no cover
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    entrypoint()
