import copy

import pytest


def data_asset(asset_id, **overrides):
    entry = {
        "id": asset_id,
        "usage": "business",
        "quantity": "many",
        "confidentiality": "internal",
        "integrity": "operational",
        "availability": "operational",
    }
    entry.update(overrides)
    return entry


def technical_asset(asset_id, **overrides):
    entry = {
        "id": asset_id,
        "type": "process",
        "usage": "business",
        "size": "service",
        "technology": "web-service-rest",
        "machine": "virtual",
        "encryption": "none",
        "confidentiality": "internal",
        "integrity": "operational",
        "availability": "operational",
        "out_of_scope": False,
        "data_assets_processed": [],
        "data_assets_stored": [],
        "communication_links": {},
    }
    entry.update(overrides)
    return entry


def communication_link(target, **overrides):
    entry = {
        "target": target,
        "protocol": "https",
        "authentication": "token",
        "authorization": "technical-user",
        "usage": "business",
        "data_assets_sent": [],
        "data_assets_received": [],
    }
    entry.update(overrides)
    return entry


SAMPLE_MODEL = {
    "title": "Sample Shop",
    "date": "2026-01-15",
    "author": {"name": "Security Team"},
    "business_criticality": "important",
    "tags_available": ["aws", "internal-only"],
    "data_assets": {
        "Customer Records": data_asset(
            "customer-records",
            confidentiality="strictly-confidential",
            integrity="critical",
            availability="important",
        ),
        "Directory Entries": data_asset("directory-entries", confidentiality="confidential"),
    },
    "technical_assets": {
        "Client": technical_asset(
            "client1",
            type="external-entity",
            size="component",
            technology="browser",
            machine="physical",
            confidentiality="public",
            used_as_client_by_human=True,
            data_assets_processed=["customer-records"],
            communication_links={
                "LDAP Lookup": communication_link(
                    "ldap1",
                    protocol="ldap",
                    authentication="credentials",
                    data_assets_sent=["directory-entries"],
                    data_assets_received=["directory-entries"],
                ),
            },
        ),
        "LDAP Server": technical_asset(
            "ldap1",
            technology="ldap-server",
            confidentiality="confidential",
            integrity="critical",
            availability="critical",
            data_assets_processed=["directory-entries"],
            data_assets_stored=["directory-entries"],
        ),
        "Customer Database": technical_asset(
            "db1",
            type="datastore",
            technology="database",
            confidentiality="strictly-confidential",
            integrity="critical",
            availability="critical",
            tags=["internal-only"],
            data_assets_stored=["customer-records"],
        ),
    },
    "trust_boundaries": {
        "Data Center": {
            "id": "data-center",
            "type": "network-on-prem",
            "technical_assets_inside": ["ldap1", "db1"],
            "trust_boundaries_nested": [],
        },
    },
    "shared_runtimes": {},
}


@pytest.fixture
def sample_model_dict():
    """Client calling an LDAP server via plain LDAP, plus an unencrypted database."""
    return copy.deepcopy(SAMPLE_MODEL)


@pytest.fixture
def write_model(tmp_path):
    """Write a model dict as YAML and return its path."""
    import yaml

    def _write(model, name="threat-model.yaml"):
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(model, f, sort_keys=False)
        return path

    return _write


@pytest.fixture
def make_plugin(tmp_path):
    """Create an executable Python plugin script from *body*.

    The script runs under the current interpreter; *body* sees ``sys``,
    ``json`` and ``args`` (the command-line arguments).
    """
    import stat
    import sys
    import textwrap

    def _make(name, body):
        path = tmp_path / name
        header = f"#!{sys.executable}\nimport json\nimport sys\nargs = sys.argv[1:]\n"
        path.write_text(header + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
