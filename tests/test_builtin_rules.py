"""Per-rule cases for the built-in risk rules: one model that fires, one that does not."""
from archrisk.context import AnalysisContext
from archrisk.loader import parse_model
from archrisk.rules.registry import find_rule
from archrisk.types import RiskExploitationImpact, RiskExploitationLikelihood

from conftest import communication_link, data_asset, technical_asset

LOW = RiskExploitationImpact.LOW
MEDIUM = RiskExploitationImpact.MEDIUM
HIGH = RiskExploitationImpact.HIGH
VERY_HIGH = RiskExploitationImpact.VERY_HIGH


def _model(technical_assets, data_assets=None, trust_boundaries=None, shared_runtimes=None, tags=None):
    return {
        "title": "Rule Fixture",
        "date": "2026-01-15",
        "tags_available": tags or [],
        "data_assets": data_assets or {},
        "technical_assets": technical_assets,
        "trust_boundaries": trust_boundaries or {},
        "shared_runtimes": shared_runtimes or {},
    }


def _boundary(boundary_id, *inside, boundary_type="network-on-prem", nested=(), tags=()):
    return {
        "id": boundary_id,
        "type": boundary_type,
        "technical_assets_inside": list(inside),
        "trust_boundaries_nested": list(nested),
        "tags": list(tags),
    }


def _generate(rule_id, model_dict, raa=None):
    model = parse_model(model_dict)
    for asset_id, score in (raa or {}).items():
        model.technical_assets[asset_id].raa = score
    return find_rule(rule_id).generate_risks(AnalysisContext(model=model))


def _by_id(risks):
    return {r.synthetic_id: r for r in risks}


def _impacts(risks):
    return {r.synthetic_id: r.exploitation_impact for r in risks}


# ---------------------------------------------------------------------------
# Development and deployment
# ---------------------------------------------------------------------------

class TestAccidentalSecretLeak:
    def test_repository_and_registry(self):
        model = _model({
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository",
                                           confidentiality="confidential"),
            "Registry": technical_asset("registry1", technology="artifact-registry",
                                        confidentiality="strictly-confidential"),
        })
        risks = _generate("accidental-secret-leak", model)
        assert _impacts(risks) == {
            "accidental-secret-leak@registry1": HIGH,
            "accidental-secret-leak@repo1": MEDIUM,
        }

    def test_git_tag_names_the_leak_prevention(self):
        model = _model({
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository", tags=["git"]),
        }, tags=["git"])
        risk = _by_id(_generate("accidental-secret-leak", model))["accidental-secret-leak@repo1"]
        assert "(Git)" in risk.title
        assert risk.exploitation_impact is LOW

    def test_out_of_scope_repository(self):
        model = _model({
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository", out_of_scope=True),
            "Service": technical_asset("app1"),
        })
        assert _generate("accidental-secret-leak", model) == []


class TestCodeBackdooring:
    def test_internet_facing_pipeline(self):
        model = _model({
            "Pipeline": technical_asset("ci1", technology="build-pipeline", internet=True, integrity="critical"),
        })
        risks = _generate("code-backdooring", model)
        assert _impacts(risks) == {"code-backdooring@ci1": HIGH}

    def test_repository_reached_from_internet(self):
        model = _model({
            "Laptop": technical_asset("laptop1", technology="browser", internet=True, communication_links={
                "Push": communication_link("repo1"),
            }),
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository"),
        })
        risks = _generate("code-backdooring", model)
        assert _impacts(risks) == {"code-backdooring@repo1": MEDIUM}

    def test_inspection_platform_stays_low(self):
        model = _model({
            "Scanner": technical_asset("scan1", technology="code-inspection-platform", internet=True,
                                       confidentiality="confidential"),
        })
        assert _impacts(_generate("code-backdooring", model)) == {"code-backdooring@scan1": LOW}

    def test_repository_behind_vpn(self):
        model = _model({
            "Laptop": technical_asset("laptop1", technology="browser", internet=True, communication_links={
                "Push": communication_link("repo1", vpn=True),
            }),
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository"),
        })
        assert _generate("code-backdooring", model) == []


class TestMissingBuildInfrastructure:
    def test_custom_code_without_pipeline(self):
        model = _model({
            "Service": technical_asset("app1", custom_developed_parts=True, confidentiality="confidential"),
            "Helper": technical_asset("helper1", custom_developed_parts=True),
        })
        risks = _generate("missing-build-infrastructure", model)
        assert _impacts(risks) == {"missing-build-infrastructure@app1": MEDIUM}

    def test_low_impact_for_internal_code(self):
        model = _model({"Service": technical_asset("app1", custom_developed_parts=True)})
        risks = _generate("missing-build-infrastructure", model)
        assert _impacts(risks) == {"missing-build-infrastructure@app1": LOW}

    def test_complete_build_infrastructure(self):
        model = _model({
            "Service": technical_asset("app1", custom_developed_parts=True),
            "Pipeline": technical_asset("ci1", technology="build-pipeline"),
            "Source Repo": technical_asset("repo1", technology="sourcecode-repository"),
            "Workstation": technical_asset("dev1", technology="devops-client"),
        })
        assert _generate("missing-build-infrastructure", model) == []


class TestPushInsteadOfPullDeployment:
    def _deployment_model(self, **link_overrides):
        link = {"usage": "devops"}
        link.update(link_overrides)
        return _model({
            "Pipeline": technical_asset("ci1", technology="build-pipeline", communication_links={
                "Deploy": communication_link("app1", **link),
            }),
            "Service": technical_asset("app1", confidentiality="confidential"),
        })

    def test_pipeline_pushing_to_business_asset(self):
        risks = _generate("push-instead-of-pull-deployment", self._deployment_model())
        assert _impacts(risks) == {"push-instead-of-pull-deployment@ci1": MEDIUM}
        assert risks[0].most_relevant_technical_asset_id == "app1"
        assert risks[0].most_relevant_communication_link_id == "ci1>deploy"

    def test_readonly_link_is_a_pull(self):
        model = self._deployment_model(readonly=True)
        assert _generate("push-instead-of-pull-deployment", model) == []


class TestUncheckedDeployment:
    def test_pipeline_deploying_code(self):
        model = _model({
            "Pipeline": technical_asset("ci1", technology="build-pipeline", communication_links={
                "Deploy": communication_link("app1", usage="devops", data_assets_sent=["code"]),
            }),
            "Service": technical_asset("app1", confidentiality="confidential"),
        }, data_assets={"Code": data_asset("code", integrity="important")})
        risks = _generate("unchecked-deployment", model)
        assert _impacts(risks) == {"unchecked-deployment@ci1": MEDIUM}
        assert risks[0].data_breach_technical_asset_ids == ["app1", "ci1"]

    def test_pipeline_without_deployments(self):
        model = _model({"Pipeline": technical_asset("ci1", technology="build-pipeline")})
        assert _impacts(_generate("unchecked-deployment", model)) == {"unchecked-deployment@ci1": LOW}

    def test_no_development_assets(self):
        model = _model({"Service": technical_asset("app1")})
        assert _generate("unchecked-deployment", model) == []


# ---------------------------------------------------------------------------
# Containers and runtimes
# ---------------------------------------------------------------------------

class TestContainerBaseimageBackdooring:
    def test_containerized_assets(self):
        model = _model({
            "Service": technical_asset("app1", machine="container"),
            "Vault": technical_asset("vault1", technology="vault", machine="container",
                                     confidentiality="strictly-confidential"),
        })
        risks = _generate("container-baseimage-backdooring", model)
        assert _impacts(risks) == {
            "container-baseimage-backdooring@app1": MEDIUM,
            "container-baseimage-backdooring@vault1": HIGH,
        }

    def test_virtual_machine(self):
        model = _model({"Service": technical_asset("app1", machine="virtual")})
        assert _generate("container-baseimage-backdooring", model) == []


class TestContainerPlatformEscape:
    def test_platform_hosting_containers(self):
        model = _model({
            "Cluster": technical_asset("k8s", technology="container-platform", integrity="mission-critical"),
            "Service": technical_asset("app1", machine="container"),
        })
        risks = _generate("container-platform-escape", model)
        assert _impacts(risks) == {"container-platform-escape@k8s": HIGH}
        assert risks[0].data_breach_technical_asset_ids == ["app1"]

    def test_out_of_scope_platform(self):
        model = _model({
            "Cluster": technical_asset("k8s", technology="container-platform", out_of_scope=True),
        })
        assert _generate("container-platform-escape", model) == []


class TestMixedTargetsOnSharedRuntime:
    def test_frontend_and_backend_together(self):
        model = _model({
            "Proxy": technical_asset("proxy1", technology="reverse-proxy"),
            "Database": technical_asset("db1", type="datastore", technology="database",
                                        confidentiality="strictly-confidential"),
        }, shared_runtimes={"Host": {"id": "host", "technical_assets_running": ["proxy1", "db1"]}})
        risks = _generate("mixed-targets-on-shared-runtime", model)
        assert _impacts(risks) == {"mixed-targets-on-shared-runtime@host": MEDIUM}

    def test_assets_from_different_trust_boundaries(self):
        model = _model({
            "Service A": technical_asset("app1"),
            "Service B": technical_asset("app2"),
        }, trust_boundaries={
            "Zone A": _boundary("zone-a", "app1"),
            "Zone B": _boundary("zone-b", "app2"),
        }, shared_runtimes={"Host": {"id": "host", "technical_assets_running": ["app1", "app2"]}})
        risks = _generate("mixed-targets-on-shared-runtime", model)
        assert _impacts(risks) == {"mixed-targets-on-shared-runtime@host": LOW}

    def test_backend_only_runtime(self):
        model = _model({
            "Database": technical_asset("db1", type="datastore", technology="database"),
            "Vault": technical_asset("vault1", technology="vault"),
        }, shared_runtimes={"Host": {"id": "host", "technical_assets_running": ["db1", "vault1"]}})
        assert _generate("mixed-targets-on-shared-runtime", model) == []


class TestWrongTrustBoundaryContent:
    def test_virtual_machine_in_namespace_boundary(self):
        model = _model({"Service": technical_asset("app1", machine="virtual")}, trust_boundaries={
            "Namespace": _boundary("ns1", "app1", boundary_type="network-policy-namespace-isolation"),
        })
        risks = _generate("wrong-trust-boundary-content", model)
        assert _impacts(risks) == {"wrong-trust-boundary-content@app1": LOW}

    def test_container_in_namespace_boundary(self):
        model = _model({"Service": technical_asset("app1", machine="container")}, trust_boundaries={
            "Namespace": _boundary("ns1", "app1", boundary_type="network-policy-namespace-isolation"),
        })
        assert _generate("wrong-trust-boundary-content", model) == []


# ---------------------------------------------------------------------------
# Web and injection
# ---------------------------------------------------------------------------

class TestCrossSiteRequestForgery:
    def _web_model(self, **link_overrides):
        return _model({
            "Client": technical_asset("client1", technology="browser", communication_links={
                "Form Post": communication_link("web1", **link_overrides),
            }),
            "Web Shop": technical_asset("web1", technology="web-application"),
        }, data_assets={"Orders": data_asset("orders", integrity="mission-critical")})

    def test_web_access_to_web_application(self):
        risks = _generate("cross-site-request-forgery", self._web_model())
        risk = _by_id(risks)["cross-site-request-forgery@web1@client1>form-post"]
        assert risk.exploitation_impact is LOW
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.VERY_LIKELY

    def test_mission_critical_payload(self):
        risks = _generate("cross-site-request-forgery", self._web_model(data_assets_sent=["orders"]))
        assert _impacts(risks) == {"cross-site-request-forgery@web1@client1>form-post": MEDIUM}

    def test_non_web_protocol(self):
        assert _generate("cross-site-request-forgery", self._web_model(protocol="ldap")) == []


class TestCrossSiteScripting:
    def test_web_applications(self):
        model = _model({
            "Web Server": technical_asset("web1", technology="web-server"),
            "Portal": technical_asset("cms1", technology="cms", data_assets_processed=["customers"]),
        }, data_assets={"Customers": data_asset("customers", confidentiality="strictly-confidential")})
        risks = _generate("cross-site-scripting", model)
        assert _impacts(risks) == {"cross-site-scripting@cms1": HIGH, "cross-site-scripting@web1": MEDIUM}

    def test_rest_service_is_not_a_web_application(self):
        model = _model({"Service": technical_asset("app1", technology="web-service-rest")})
        assert _generate("cross-site-scripting", model) == []


class TestMissingWaf:
    def test_web_application_reached_across_boundary(self):
        model = _model({
            "Client": technical_asset("client1", technology="browser", communication_links={
                "Browse": communication_link("web1"),
            }),
            "Web Shop": technical_asset("web1", technology="web-application"),
        }, trust_boundaries={"DMZ": _boundary("dmz", "web1")})
        assert _impacts(_generate("missing-waf", model)) == {"missing-waf@web1": LOW}

    def test_strictly_confidential_web_application(self):
        model = _model({
            "Client": technical_asset("client1", technology="browser", communication_links={
                "Browse": communication_link("web1"),
            }),
            "Web Shop": technical_asset("web1", technology="web-application",
                                        confidentiality="strictly-confidential"),
        }, trust_boundaries={"DMZ": _boundary("dmz", "web1")})
        assert _impacts(_generate("missing-waf", model)) == {"missing-waf@web1": MEDIUM}

    def test_waf_in_front(self):
        model = _model({
            "Client": technical_asset("client1", technology="browser", communication_links={
                "Browse": communication_link("waf1"),
            }),
            "Firewall": technical_asset("waf1", technology="waf", communication_links={
                "Forward": communication_link("web1"),
            }),
            "Web Shop": technical_asset("web1", technology="web-application"),
        }, trust_boundaries={"DMZ": _boundary("dmz", "web1")})
        assert _generate("missing-waf", model) == []


class TestPathTraversal:
    def _file_model(self, **caller_overrides):
        return _model({
            "Service": technical_asset("app1", communication_links={
                "Read Files": communication_link("fs1", protocol="sftp"),
            }, **caller_overrides),
            "File Server": technical_asset("fs1", type="datastore", technology="file-server",
                                           integrity="mission-critical"),
        })

    def test_access_to_file_server(self):
        risks = _generate("path-traversal", self._file_model())
        risk = _by_id(risks)["path-traversal@app1@fs1@app1>read-files"]
        assert risk.exploitation_impact is HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.VERY_LIKELY

    def test_out_of_scope_caller(self):
        assert _generate("path-traversal", self._file_model(out_of_scope=True)) == []


class TestSearchQueryInjection:
    def _search_model(self, protocol="https", **engine_overrides):
        return _model({
            "Service": technical_asset("app1", communication_links={
                "Query": communication_link("search1", protocol=protocol),
            }),
            "Search": technical_asset("search1", technology="search-engine", **engine_overrides),
        })

    def test_internal_search_engine(self):
        risks = _generate("search-query-injection", self._search_model())
        assert _impacts(risks) == {"search-query-injection@app1@search1@app1>query": LOW}

    def test_strictly_confidential_index(self):
        risks = _generate("search-query-injection", self._search_model(confidentiality="strictly-confidential"))
        assert _impacts(risks) == {"search-query-injection@app1@search1@app1>query": HIGH}

    def test_non_search_protocol(self):
        assert _generate("search-query-injection", self._search_model(protocol="ldap")) == []


class TestServerSideRequestForgery:
    def test_service_fetching_over_http(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={"Fetch": communication_link("ext1")}),
            "Partner API": technical_asset("ext1"),
        })
        risks = _generate("server-side-request-forgery", model)
        assert _impacts(risks) == {"server-side-request-forgery@app1@ext1@app1>fetch": LOW}
        assert risks[0].data_breach_technical_asset_ids == ["app1", "ext1"]

    def test_cloud_boundary_raises_impact(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={"Fetch": communication_link("ext1")}),
            "Partner API": technical_asset("ext1"),
        }, trust_boundaries={"Cloud": _boundary("cloud", "app1", boundary_type="network-cloud-provider")})
        risks = _generate("server-side-request-forgery", model)
        assert _impacts(risks) == {"server-side-request-forgery@app1@ext1@app1>fetch": MEDIUM}

    def test_clients_and_non_web_links(self):
        model = _model({
            "Client": technical_asset("client1", technology="browser", communication_links={
                "Browse": communication_link("app1"),
            }),
            "Service": technical_asset("app1", communication_links={
                "Query": communication_link("db1", protocol="jdbc"),
            }),
            "Database": technical_asset("db1", type="datastore", technology="database"),
        })
        assert _generate("server-side-request-forgery", model) == []


class TestSqlNosqlInjection:
    def _db_model(self, protocol, technology="database", **db_overrides):
        return _model({
            "Service": technical_asset("app1", communication_links={
                "Query": communication_link("db1", protocol=protocol),
            }),
            "Database": technical_asset("db1", type="datastore", technology=technology, **db_overrides),
        })

    def test_jdbc_access(self):
        risks = _generate("sql-nosql-injection", self._db_model("jdbc"))
        risk = _by_id(risks)["sql-nosql-injection@app1@db1@app1>query"]
        assert risk.exploitation_impact is MEDIUM
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.VERY_LIKELY

    def test_http_to_strictly_confidential_database(self):
        risks = _generate("sql-nosql-injection", self._db_model("https", confidentiality="strictly-confidential"))
        assert _impacts(risks) == {"sql-nosql-injection@app1@db1@app1>query": HIGH}

    def test_http_to_other_datastore(self):
        assert _generate("sql-nosql-injection", self._db_model("https", technology="file-server")) == []


class TestUntrustedDeserialization:
    def test_serialization_accepted(self):
        model = _model({"Service": technical_asset("app1", data_formats_accepted=["serialization", "json"])})
        risk = _by_id(_generate("untrusted-deserialization", model))["untrusted-deserialization@app1"]
        assert risk.exploitation_impact is HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.LIKELY

    def test_remote_objects_across_trust_boundary(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={
                "Remote Call": communication_link("ejb1", protocol="iiop"),
            }),
            "Beans": technical_asset("ejb1", technology="ejb", confidentiality="strictly-confidential"),
        }, trust_boundaries={"Backend": _boundary("backend", "ejb1")})
        risk = _by_id(_generate("untrusted-deserialization", model))["untrusted-deserialization@ejb1"]
        assert risk.exploitation_impact is VERY_HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.VERY_LIKELY

    def test_json_only(self):
        model = _model({"Service": technical_asset("app1", data_formats_accepted=["json"])})
        assert _generate("untrusted-deserialization", model) == []


class TestXmlExternalEntityImpact:
    def test_strictly_confidential_parser(self):
        model = _model({"Service": technical_asset("app1", data_formats_accepted=["xml"],
                                                   confidentiality="strictly-confidential")})
        assert _impacts(_generate("xml-external-entity", model)) == {"xml-external-entity@app1": HIGH}

    def test_out_of_scope_parser(self):
        model = _model({"Service": technical_asset("app1", data_formats_accepted=["xml"], out_of_scope=True)})
        assert _generate("xml-external-entity", model) == []


class TestMissingFileValidation:
    def test_custom_upload_handler(self):
        model = _model({
            "Upload": technical_asset("app1", custom_developed_parts=True, data_formats_accepted=["file"]),
            "Archive": technical_asset("app2", custom_developed_parts=True, data_formats_accepted=["file"],
                                       availability="mission-critical"),
        })
        risks = _generate("missing-file-validation", model)
        assert _impacts(risks) == {"missing-file-validation@app1": LOW, "missing-file-validation@app2": MEDIUM}

    def test_off_the_shelf_product(self):
        model = _model({"Upload": technical_asset("app1", data_formats_accepted=["file"])})
        assert _generate("missing-file-validation", model) == []


# ---------------------------------------------------------------------------
# Authentication and identity
# ---------------------------------------------------------------------------

class TestMissingAuthentication:
    def _auth_model(self, authentication="none", data=None, **target_overrides):
        target = {"confidentiality": "confidential"}
        target.update(target_overrides)
        return _model({
            "Web Shop": technical_asset("web1", technology="web-application", communication_links={
                "Api Call": communication_link("api1", authentication=authentication,
                                               data_assets_sent=data or []),
            }),
            "Backend API": technical_asset("api1", **target),
        }, data_assets={
            "Secrets": data_asset("secrets", confidentiality="strictly-confidential"),
            "Notes": data_asset("notes"),
        })

    def test_link_without_data(self):
        risks = _generate("missing-authentication", self._auth_model())
        risk = _by_id(risks)["missing-authentication@web1>api-call@web1@api1"]
        assert risk.exploitation_impact is MEDIUM
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.LIKELY

    def test_impact_follows_transferred_data(self):
        high = _generate("missing-authentication", self._auth_model(data=["secrets"]))
        low = _generate("missing-authentication", self._auth_model(data=["notes"]))
        assert _impacts(high) == {"missing-authentication@web1>api-call@web1@api1": HIGH}
        assert _impacts(low) == {"missing-authentication@web1>api-call@web1@api1": LOW}

    def test_authenticated_link(self):
        assert _generate("missing-authentication", self._auth_model(authentication="token")) == []

    def test_insensitive_target(self):
        assert _generate("missing-authentication", self._auth_model(confidentiality="internal")) == []


class TestMissingIdentityPropagation:
    def _propagation_model(self, authorization="technical-user", **target_overrides):
        target = {"confidentiality": "confidential"}
        target.update(target_overrides)
        return _model({
            "Web Shop": technical_asset("web1", technology="web-application", communication_links={
                "Api Call": communication_link("api1", authorization=authorization),
            }),
            "Backend API": technical_asset("api1", **target),
        })

    def test_technical_user_towards_sensitive_service(self):
        risks = _generate("missing-identity-propagation", self._propagation_model())
        assert _impacts(risks) == {"missing-identity-propagation@web1>api-call@web1@api1": LOW}

    def test_strictly_confidential_service(self):
        model = self._propagation_model(confidentiality="strictly-confidential")
        risks = _generate("missing-identity-propagation", model)
        assert _impacts(risks) == {"missing-identity-propagation@web1>api-call@web1@api1": MEDIUM}

    def test_enduser_identity_is_propagated(self):
        model = self._propagation_model(authorization="enduser-identity-propagation")
        assert _generate("missing-identity-propagation", model) == []


class TestMissingIdentityProviderIsolation:
    def test_shared_network_segment(self):
        model = _model({
            "IdP": technical_asset("idp1", technology="identity-provider"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={"LAN": _boundary("lan", "idp1", "app1")})
        risks = _by_id(_generate("missing-identity-provider-isolation", model))
        risk = risks["missing-identity-provider-isolation@idp1"]
        assert risk.exploitation_impact is HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.UNLIKELY

    def test_shared_execution_environment(self):
        model = _model({
            "IdP": technical_asset("idp1", technology="identity-provider", integrity="mission-critical"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={"Host": _boundary("host", "idp1", "app1", boundary_type="execution-environment")})
        risks = _by_id(_generate("missing-identity-provider-isolation", model))
        risk = risks["missing-identity-provider-isolation@idp1"]
        assert risk.exploitation_impact is VERY_HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.LIKELY

    def test_isolated_identity_provider(self):
        model = _model({
            "IdP": technical_asset("idp1", technology="identity-provider"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={
            "Identity Zone": _boundary("identity-zone", "idp1"),
            "Apps": _boundary("apps", "app1"),
        })
        assert _generate("missing-identity-provider-isolation", model) == []


class TestMissingIdentityStore:
    def _store_model(self, with_store=False):
        assets = {
            "Web Shop": technical_asset("web1", technology="web-application", communication_links={
                "Api Call": communication_link("api1", authorization="enduser-identity-propagation"),
            }),
            "Backend API": technical_asset("api1", confidentiality="confidential"),
        }
        if with_store:
            assets["Directory"] = technical_asset("ldap1", type="datastore", technology="identity-store-ldap")
        return _model(assets)

    def test_propagation_without_identity_store(self):
        risks = _generate("missing-identity-store", self._store_model())
        assert _impacts(risks) == {"missing-identity-store@api1": MEDIUM}

    def test_identity_store_modeled(self):
        assert _generate("missing-identity-store", self._store_model(with_store=True)) == []


class TestServiceRegistryPoisoning:
    def test_registry_without_callers(self):
        model = _model({"Registry": technical_asset("reg1", technology="service-registry")})
        assert _impacts(_generate("service-registry-poisoning", model)) == {"service-registry-poisoning@reg1": LOW}

    def test_mission_critical_registration(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={
                "Register": communication_link("reg1", data_assets_sent=["routes"]),
            }),
            "Registry": technical_asset("reg1", technology="service-registry"),
        }, data_assets={"Routes": data_asset("routes", integrity="mission-critical")})
        assert _impacts(_generate("service-registry-poisoning", model)) == {"service-registry-poisoning@reg1": MEDIUM}

    def test_out_of_scope_registry(self):
        model = _model({"Registry": technical_asset("reg1", technology="service-registry", out_of_scope=True)})
        assert _generate("service-registry-poisoning", model) == []


class TestUnguardedAccessFromInternet:
    def _internet_model(self, target_technology="web-service-rest", **link_overrides):
        return _model({
            "Client": technical_asset("client1", technology="browser", internet=True, communication_links={
                "Call": communication_link("app1", **link_overrides),
            }),
            "Service": technical_asset("app1", technology=target_technology, confidentiality="confidential"),
        })

    def test_direct_internet_access(self):
        risks = _generate("unguarded-access-from-internet", self._internet_model())
        assert _impacts(risks) == {"unguarded-access-from-internet@app1@client1@client1>call": LOW}

    def test_attractive_target(self):
        risks = _generate("unguarded-access-from-internet", self._internet_model(), raa={"app1": 41})
        assert _impacts(risks) == {"unguarded-access-from-internet@app1@client1@client1>call": MEDIUM}

    def test_vpn_and_standard_web_traffic(self):
        assert _generate("unguarded-access-from-internet", self._internet_model(vpn=True)) == []
        assert _generate("unguarded-access-from-internet", self._internet_model("web-server")) == []


class TestUnguardedDirectDatastoreAccess:
    def _datastore_model(self, client_inside=False):
        inside = ["db1", "app1"] if client_inside else ["db1"]
        return _model({
            "Service": technical_asset("app1", communication_links={
                "Query": communication_link("db1", protocol="jdbc"),
            }),
            "Database": technical_asset("db1", type="datastore", technology="database",
                                        confidentiality="confidential"),
        }, trust_boundaries={"Data": _boundary("data", *inside)})

    def test_access_from_other_network(self):
        risks = _generate("unguarded-direct-datastore-access", self._datastore_model())
        assert _impacts(risks) == {"unguarded-direct-datastore-access@app1>query@app1@db1": LOW}

    def test_attractive_datastore(self):
        risks = _generate("unguarded-direct-datastore-access", self._datastore_model(), raa={"db1": 41})
        assert _impacts(risks) == {"unguarded-direct-datastore-access@app1>query@app1@db1": MEDIUM}

    def test_access_from_same_network(self):
        model = self._datastore_model(client_inside=True)
        assert _generate("unguarded-direct-datastore-access", model) == []


# ---------------------------------------------------------------------------
# Hardening and isolation
# ---------------------------------------------------------------------------

class TestMissingHardening:
    def _hardening_model(self, **service_overrides):
        return _model({
            "Service": technical_asset("app1", **service_overrides),
            "Database": technical_asset("db1", type="datastore", technology="database"),
        })

    def test_attractive_service(self):
        risks = _generate("missing-hardening", self._hardening_model(), raa={"app1": 55})
        assert _impacts(risks) == {"missing-hardening@app1": LOW}

    def test_reduced_limit_for_high_value_targets(self):
        risks = _generate("missing-hardening", self._hardening_model(), raa={"app1": 40, "db1": 40})
        assert _impacts(risks) == {"missing-hardening@db1": LOW}

    def test_strictly_confidential_service(self):
        model = self._hardening_model(confidentiality="strictly-confidential")
        risks = _generate("missing-hardening", model, raa={"app1": 60})
        assert _impacts(risks) == {"missing-hardening@app1": MEDIUM}

    def test_unattractive_assets(self):
        assert _generate("missing-hardening", self._hardening_model(), raa={"app1": 54, "db1": 39}) == []


class TestMissingNetworkSegmentation:
    def _segment_model(self, connected=False, **db_overrides):
        links = {"Query": communication_link("db1", protocol="jdbc")} if connected else {}
        return _model({
            "Web Shop": technical_asset("web1", technology="web-application", communication_links=links),
            "Database": technical_asset("db1", type="datastore", technology="database", **db_overrides),
        }, trust_boundaries={"LAN": _boundary("lan", "web1", "db1")})

    def test_datastore_next_to_web_application(self):
        risks = _generate("missing-network-segmentation", self._segment_model(), raa={"db1": 50})
        assert _impacts(risks) == {"missing-network-segmentation@db1": LOW}

    def test_strictly_confidential_datastore(self):
        model = self._segment_model(confidentiality="strictly-confidential")
        risks = _generate("missing-network-segmentation", model, raa={"db1": 50})
        assert _impacts(risks) == {"missing-network-segmentation@db1": MEDIUM}

    def test_below_attractiveness_limit(self):
        assert _generate("missing-network-segmentation", self._segment_model(), raa={"db1": 49}) == []

    def test_directly_connected_neighbour(self):
        model = self._segment_model(connected=True)
        assert _generate("missing-network-segmentation", model, raa={"db1": 50}) == []


class TestMissingVaultIsolation:
    def test_vault_sharing_network(self):
        model = _model({
            "Vault": technical_asset("vault1", technology="vault"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={"LAN": _boundary("lan", "vault1", "app1")})
        assert _impacts(_generate("missing-vault-isolation", model)) == {"missing-vault-isolation@vault1": MEDIUM}

    def test_mission_critical_vault_sharing_execution_environment(self):
        model = _model({
            "Vault": technical_asset("vault1", technology="vault", availability="mission-critical"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={"Host": _boundary("host", "vault1", "app1", boundary_type="execution-environment")})
        risk = _by_id(_generate("missing-vault-isolation", model))["missing-vault-isolation@vault1"]
        assert risk.exploitation_impact is HIGH
        assert risk.exploitation_likelihood is RiskExploitationLikelihood.LIKELY

    def test_vault_next_to_its_own_storage(self):
        model = _model({
            "Vault": technical_asset("vault1", technology="vault", communication_links={
                "Persist": communication_link("store1", protocol="jdbc"),
            }),
            "Vault Storage": technical_asset("store1", type="datastore", technology="database"),
            "Service": technical_asset("app1"),
        }, trust_boundaries={
            "Vault Zone": _boundary("vault-zone", "vault1", "store1"),
            "Apps": _boundary("apps", "app1"),
        })
        assert _generate("missing-vault-isolation", model) == []


class TestMissingCloudHardening:
    def test_untagged_cloud_boundary(self):
        model = _model({"Service": technical_asset("app1")}, trust_boundaries={
            "Cloud": _boundary("cloud", "app1", boundary_type="network-cloud-provider"),
        })
        risks = _generate("missing-cloud-hardening", model)
        assert _impacts(risks) == {"missing-cloud-hardening@cloud": MEDIUM}
        assert risks[0].most_relevant_trust_boundary_id == "cloud"

    def test_provider_tagged_asset(self):
        model = _model({
            "Service": technical_asset("app1", tags=["aws"], confidentiality="strictly-confidential"),
        }, tags=["aws"])
        risks = _generate("missing-cloud-hardening", model)
        assert _impacts(risks) == {"missing-cloud-hardening@app1": VERY_HIGH}
        assert "(AWS)" in risks[0].title

    def test_on_prem_only(self):
        model = _model({"Service": technical_asset("app1")}, trust_boundaries={"LAN": _boundary("lan", "app1")})
        assert _generate("missing-cloud-hardening", model) == []


# ---------------------------------------------------------------------------
# Model hygiene
# ---------------------------------------------------------------------------

class TestIncompleteModel:
    def test_unknown_technology_and_protocol(self):
        model = _model({
            "Mystery Box": technical_asset("box1", technology="unknown-technology"),
            "Service": technical_asset("app1", communication_links={
                "Side Channel": communication_link("box1", protocol="unknown-protocol"),
            }),
        })
        risks = _generate("incomplete-model", model)
        assert _impacts(risks) == {
            "incomplete-model@app1>side-channel@app1": LOW,
            "incomplete-model@box1": LOW,
        }

    def test_out_of_scope_asset(self):
        model = _model({"Mystery Box": technical_asset("box1", technology="unknown-technology", out_of_scope=True)})
        assert _generate("incomplete-model", model) == []


class TestUnnecessaryCommunicationLink:
    def test_link_without_data(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={"Ping": communication_link("app2")}),
            "Other Service": technical_asset("app2"),
        })
        risks = _generate("unnecessary-communication-link", model)
        assert _impacts(risks) == {"unnecessary-communication-link@app1>ping@app1": LOW}

    def test_link_carrying_data(self):
        model = _model({
            "Service": technical_asset("app1", communication_links={
                "Ping": communication_link("app2", data_assets_sent=["notes"]),
            }),
            "Other Service": technical_asset("app2"),
        }, data_assets={"Notes": data_asset("notes")})
        assert _generate("unnecessary-communication-link", model) == []


class TestUnnecessaryDataAsset:
    def test_unreferenced_data_asset(self):
        model = _model({"Service": technical_asset("app1", data_assets_processed=["notes"])}, data_assets={
            "Notes": data_asset("notes"),
            "Orphan": data_asset("orphan"),
        })
        risks = _generate("unnecessary-data-asset", model)
        assert _impacts(risks) == {"unnecessary-data-asset@orphan": LOW}
        assert risks[0].most_relevant_data_asset_id == "orphan"

    def test_every_data_asset_used(self):
        model = _model({"Service": technical_asset("app1", data_assets_stored=["notes"])}, data_assets={
            "Notes": data_asset("notes"),
        })
        assert _generate("unnecessary-data-asset", model) == []


class TestWrongCommunicationLinkProtocol:
    def _library_model(self, target_technology):
        return _model({
            "Service": technical_asset("app1", communication_links={
                "Call Lib": communication_link("lib1", protocol="in-process-library-call",
                                               data_assets_sent=["notes"]),
            }),
            "Helper": technical_asset("lib1", technology=target_technology, data_assets_processed=["notes"]),
        }, data_assets={"Notes": data_asset("notes")})

    def test_library_call_to_service(self):
        risks = _generate("wrong-communication-link-content", self._library_model("web-service-rest"))
        assert _impacts(risks) == {"wrong-communication-link-content@app1@app1>call-lib": LOW}
        assert "library" in risks[0].title

    def test_library_call_to_library(self):
        assert _generate("wrong-communication-link-content", self._library_model("library")) == []
