"""Tests for YAML build manifests."""

import tempfile
from pathlib import Path

import pytest
import yaml

from sourcescan.registry.errors import InvalidArgument, Unauthorized
from sourcescan.registry.local_registry import SourceScanRegistry
from sourcescan.registry.manifest import load_manifest, parse_manifest
from sourcescan.registry.models import GithubData


def _write_manifest(tmpdir: str, account_id: str = "app.testnet", **overrides) -> str:
    contract = {
        "account_id": account_id,
        "cid": "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi",
        "code_hash": "8Gkb5XzkzjZqV3VDbPrMwvN1mw7xpZKXCxqT6mRc8uNc",
        "lang": "rust",
        "entry_point": "src/lib.rs",
        "builder_image": "sourcescan/builder-rust:1.0",
        "github": {"owner": "near", "repo": "app", "sha": "a1b2c3"},
    }
    contract.update(overrides)
    path = Path(tmpdir) / f"{account_id}.yaml"
    with open(path, "w") as f:
        yaml.dump({"contract": contract}, f)
    return str(path)


def test_load_manifest():
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = load_manifest(_write_manifest(tmpdir))
        assert manifest.account_id == "app.testnet"
        assert manifest.lang == "rust"
        assert manifest.github == GithubData(owner="near", repo="app", sha="a1b2c3")


def test_manifest_without_github():
    with tempfile.TemporaryDirectory() as tmpdir:
        manifest = load_manifest(_write_manifest(tmpdir, github=None))
        assert manifest.github is None


def test_manifest_missing_fields():
    with pytest.raises(InvalidArgument, match="code_hash"):
        parse_manifest({"contract": {"account_id": "a.near", "cid": "x"}})
    with pytest.raises(InvalidArgument):
        parse_manifest({"something": "else"})
    with pytest.raises(InvalidArgument):
        parse_manifest(None)


def test_manifest_incomplete_github():
    data = {
        "contract": {
            "account_id": "a.near",
            "cid": "c",
            "code_hash": "h",
            "lang": "rust",
            "entry_point": "main",
            "builder_image": "img",
            "github": {"owner": "near"},
        }
    }
    with pytest.raises(InvalidArgument, match="github"):
        parse_manifest(data)


def test_publish_registers_contract():
    with tempfile.TemporaryDirectory() as tmpdir:
        reg = SourceScanRegistry()
        reg.initialize("owner.near")
        path = _write_manifest(tmpdir)

        with pytest.raises(Unauthorized):
            reg.publish("someone.near", path)

        record = reg.publish("owner.near", path)
        assert record.lang == "rust"
        assert reg.get_contract("app.testnet").github.repo == "app"
