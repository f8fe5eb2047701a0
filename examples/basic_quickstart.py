from catalogrules import CatalogRulesEnforcer, Entity, LocationSpec


def main() -> None:
    config = {
        "catalog": {
            "rules": [
                # groups are not accepted from anywhere...
                {"allow": [], "deny": [{"kind": "Group"}]},
                # ...except from files curated by the platform team
                {"allow": [{"kind": "Group"}, {"kind": "User"}], "locations": [{"type": "file"}]},
            ]
        }
    }
    enforcer = CatalogRulesEnforcer.from_config(config)

    github = LocationSpec(type="github", target="https://github.com/acme/svc/blob/main/catalog-info.yaml")
    org_file = LocationSpec(type="file", target="/etc/catalog/org.yaml")

    print(enforcer.is_allowed(Entity(kind="Component"), github))  # True
    print(enforcer.is_allowed(Entity(kind="Group"), github))  # False
    print(enforcer.is_allowed(Entity(kind="Group"), org_file))  # True
    d = enforcer.evaluate(Entity(kind="Component"), org_file)
    print(d.allowed, d.reason, d.rule_index)  # False not-in-allow-list 1


if __name__ == "__main__":
    main()
