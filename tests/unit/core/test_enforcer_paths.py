import types
from concurrent.futures import ThreadPoolExecutor

import pytest

from catalogrules.core.enforcer import CatalogRulesEnforcer
from catalogrules.core.model import CatalogRule, Entity, KindMatcher, LocationMatcher, LocationSpec
from catalogrules.store.rules_loader import RulesConfigError

GITHUB = LocationSpec(type="github", target="https://github.com/a/b/blob/master/catalog-info.yaml")
FILE = LocationSpec(type="file", target="/etc/catalog/users.yaml")


def test_accepts_dataclass_rules_and_keeps_order():
    r1 = CatalogRule(deny=(KindMatcher("Group"),))
    r2 = CatalogRule(allow=(KindMatcher("Group"),), locations=(LocationMatcher("file"),))
    enforcer = CatalogRulesEnforcer([r1, r2])
    assert enforcer.rules == (r1, r2)
    assert enforcer.is_allowed(Entity(kind="Group"), FILE) is True
    assert enforcer.is_allowed(Entity(kind="Group"), GITHUB) is False


def test_rules_are_stored_as_tuple():
    source = [{"allow": []}]
    enforcer = CatalogRulesEnforcer(source)
    source.append({"deny": [{"kind": "User"}]})
    assert len(enforcer.rules) == 1
    assert isinstance(enforcer.rules, tuple)


def test_evaluate_reports_reason_and_rule_index():
    enforcer = CatalogRulesEnforcer(
        [
            {"deny": [{"kind": "Group"}]},
            {"allow": [{"kind": "Component"}], "locations": [{"type": "file"}]},
        ]
    )
    d = enforcer.evaluate(Entity(kind="Group"), GITHUB)
    assert (d.allowed, d.reason, d.rule_index) == (False, "denied", 0)

    d = enforcer.evaluate(Entity(kind="User"), GITHUB)
    assert (d.allowed, d.reason, d.rule_index) == (True, "allowed", 0)

    d = enforcer.evaluate(Entity(kind="User"), FILE)
    assert (d.allowed, d.reason, d.rule_index) == (False, "not-in-allow-list", 1)

    d = enforcer.evaluate(Entity(kind="component"), FILE)
    assert (d.allowed, d.reason, d.rule_index) == (True, "allowed", 1)


def test_evaluate_without_rules_and_without_applicable_rule():
    assert CatalogRulesEnforcer().evaluate(Entity(kind="User"), FILE).reason == "no-rules"

    enforcer = CatalogRulesEnforcer([{"deny": [{"kind": "User"}], "locations": [{"type": "url"}]}])
    d = enforcer.evaluate(Entity(kind="User"), FILE)
    assert d.allowed is True
    assert d.reason == "no-applicable-rule"
    assert d.rule_index is None


def test_skipped_rule_set_keeps_earlier_verdict():
    enforcer = CatalogRulesEnforcer(
        [
            {"deny": [{"kind": "User"}]},
            {"allow": [], "locations": [{"type": "url"}]},
        ]
    )
    assert enforcer.is_allowed(Entity(kind="User"), FILE) is False


def test_duck_typed_descriptors():
    enforcer = CatalogRulesEnforcer([{"deny": [{"kind": "Group"}], "locations": [{"type": "github"}]}])
    ent = types.SimpleNamespace(kind="group", metadata={"name": "team-a"})
    loc = types.SimpleNamespace(type="GitHub", target="x")
    assert enforcer.is_allowed(ent, loc) is False


def test_unknown_kinds_never_match_and_never_raise():
    enforcer = CatalogRulesEnforcer([{"allow": [{"kind": "*"}]}])
    assert enforcer.is_allowed(Entity(kind="User"), FILE) is False
    assert enforcer.is_allowed(Entity(kind="*"), FILE) is True


def test_malformed_mapping_rules_are_rejected_at_construction():
    with pytest.raises(RulesConfigError) as ei:
        CatalogRulesEnforcer([{"allow": []}, {"deny": [{"kind": 7}]}])
    assert ei.value.path == "/1/deny/0/kind"


def test_from_config_reads_catalog_rules():
    config = {
        "catalog": {
            "rules": [
                {"allow": [{"kind": "Component"}, {"kind": "API"}]},
                {"allow": [{"kind": "User"}, {"kind": "Group"}], "locations": [{"type": "file"}]},
            ]
        }
    }
    enforcer = CatalogRulesEnforcer.from_config(config)
    assert len(enforcer.rules) == 2
    assert enforcer.is_allowed(Entity(kind="User"), FILE) is True
    assert enforcer.is_allowed(Entity(kind="User"), GITHUB) is False
    assert enforcer.is_allowed(Entity(kind="API"), GITHUB) is True


@pytest.mark.parametrize("config", [{}, {"catalog": {}}, {"catalog": {"rules": None}}])
def test_from_config_without_rules_is_permissive(config):
    enforcer = CatalogRulesEnforcer.from_config(config)
    assert enforcer.rules == ()
    assert enforcer.is_allowed(Entity(kind="Anything"), GITHUB) is True


@pytest.mark.parametrize("bad", [{}, "", 0, False])
def test_from_config_rejects_falsy_non_list_rules(bad):
    with pytest.raises(RulesConfigError):
        CatalogRulesEnforcer.from_config({"catalog": {"rules": bad}})


def test_concurrent_callers_share_one_instance():
    enforcer = CatalogRulesEnforcer(
        [
            {"allow": [], "deny": [{"kind": "Group"}]},
            {"allow": [{"kind": "Group"}], "locations": [{"type": "file"}]},
        ]
    )
    cases = [(Entity(kind="Group"), FILE, True), (Entity(kind="Group"), GITHUB, False)] * 200

    def run(case):
        ent, loc, expected = case
        return enforcer.is_allowed(ent, loc) is expected

    with ThreadPoolExecutor(max_workers=8) as pool:
        assert all(pool.map(run, cases))
