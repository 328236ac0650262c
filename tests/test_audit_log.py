"""Tests for the JSONL audit logger."""

import tempfile
from pathlib import Path

from sourcescan.security.audit_log import AuditLogger


def test_log_and_filter_events():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("alice.near", "set_contract", "contract", "app.near", "Contract app.near added")
        audit.log_event("bob.near", "vote", "contract", "app.near", details={"kind": "upvote"})
        audit.log_event("alice.near", "set_owner", "registry", "carol.near")

        assert len(audit.get_events()) == 3
        assert [e.action for e in audit.get_events(actor="alice.near")] == ["set_owner", "set_contract"]
        assert audit.get_events(action="vote")[0].details == {"kind": "upvote"}
        assert len(audit.get_events(limit=1)) == 1

        events = audit.get_events_for_resource("contract", "app.near")
        assert [e.actor for e in events] == ["bob.near", "alice.near"]


def test_log_files_are_jsonl():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogger(Path(tmpdir))
        audit.log_event("alice.near", "initialize", "registry", "alice.near")
        files = list(Path(tmpdir).glob("*.jsonl"))
        assert len(files) == 1
        assert len(files[0].read_text().strip().splitlines()) == 1


def test_env_var_sets_directory(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("SOURCESCAN_AUDIT_DIR", tmpdir)
        AuditLogger().log_event("alice.near", "initialize", "registry", "alice.near")
        assert list(Path(tmpdir).glob("*.jsonl"))
