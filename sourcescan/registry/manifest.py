"""Build manifests — YAML descriptions of a verified build."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from sourcescan.registry.errors import InvalidArgument
from sourcescan.registry.models import GithubData

REQUIRED_FIELDS = ("account_id", "cid", "code_hash", "lang", "entry_point", "builder_image")


@dataclass
class BuildManifest:
    """Fields needed to register one contract."""

    account_id: str
    cid: str
    code_hash: str
    lang: str
    entry_point: str
    builder_image: str
    github: Optional[GithubData] = None


def parse_manifest(data: dict) -> BuildManifest:
    """Build a ``BuildManifest`` from already-parsed YAML data."""
    if not isinstance(data, dict) or not isinstance(data.get("contract"), dict):
        raise InvalidArgument("Manifest must contain a 'contract' mapping")
    contract = data["contract"]

    missing = [name for name in REQUIRED_FIELDS if not contract.get(name)]
    if missing:
        raise InvalidArgument(f"Manifest is missing required fields: {', '.join(missing)}")

    github = None
    gh = contract.get("github")
    if gh:
        try:
            github = GithubData(owner=str(gh["owner"]), repo=str(gh["repo"]), sha=str(gh["sha"]))
        except (KeyError, TypeError) as exc:
            raise InvalidArgument(f"Manifest 'github' entry is incomplete: {exc}") from exc

    return BuildManifest(
        **{name: str(contract[name]) for name in REQUIRED_FIELDS},
        github=github,
    )


def load_manifest(path: str | Path) -> BuildManifest:
    """Read and parse a YAML build manifest."""
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise InvalidArgument(f"Manifest {path} is not valid YAML: {exc}") from exc
    return parse_manifest(data)
