"""Local file-based registry implementation.

A simple, file-system-backed registry of verified contract builds.
Stores the owner, the records and the comment log as one JSON state file.
Every operation runs to completion before the next starts; callers that
share one instance across threads must serialize access themselves.

A mutation either completes fully (memory, state file and audit event)
or raises with the previous state restored.
"""

from __future__ import annotations

import json
import re
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from sourcescan.auth.permissions import authorize
from sourcescan.registry.comments import CommentLog
from sourcescan.registry.errors import (
    AlreadyInitialized,
    InvalidArgument,
    NotFound,
    NotInitialized,
)
from sourcescan.registry.manifest import load_manifest
from sourcescan.registry.models import (
    Comment,
    ContractRecord,
    GithubData,
    Page,
    Reaction,
    ReactionKind,
    ReactionSet,
)
from sourcescan.registry import pager
from sourcescan.registry.store import RecordStore
from sourcescan.security.audit_log import AuditLogger

_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")

VOTE_KINDS = (ReactionKind.upvote, ReactionKind.downvote)
COMMENT_REACTION_KINDS = (ReactionKind.like,)


def validate_account_id(account_id: str) -> None:
    if not 2 <= len(account_id) <= 64 or not _ACCOUNT_ID_RE.match(account_id):
        raise InvalidArgument(f"Invalid account id: {account_id!r}")


class SourceScanRegistry:
    """Access-controlled registry of verified contract builds."""

    STATE_FILE = "state.json"

    def __init__(
        self,
        state_dir: Optional[str | Path] = None,
        audit: Optional[AuditLogger] = None,
        clock: Callable[[], int] = time.time_ns,
    ):
        self.state_dir = Path(state_dir) if state_dir is not None else None
        self.state_path: Optional[Path] = None
        if self.state_dir is not None:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self.state_path = self.state_dir / self.STATE_FILE
        self.audit = audit
        self._clock = clock

        self._owner_id: Optional[str] = None
        self._contracts = RecordStore()
        self._comments = CommentLog()
        self._written = False
        self._load_state()

    @property
    def initialized(self) -> bool:
        return self._owner_id is not None

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def initialize(self, caller_id: str) -> None:
        """Create empty registry state owned by ``caller_id``.

        The caller must be a valid account id, like any later owner.
        """
        if self.initialized:
            raise AlreadyInitialized("Already initialized")
        validate_account_id(caller_id)

        with self._transaction():
            self._owner_id = caller_id
            self._contracts = RecordStore()
            self._comments = CommentLog()
            self._commit(caller_id, "initialize", "registry", caller_id, f"Registry initialized by {caller_id}")

    def get_owner(self) -> str:
        if self._owner_id is None:
            raise NotInitialized("Registry should be initialized before usage")
        return self._owner_id

    def set_owner(self, caller_id: str, owner_id: str) -> None:
        authorize(caller_id, self.get_owner())
        validate_account_id(owner_id)

        with self._transaction():
            self._owner_id = owner_id
            self._commit(caller_id, "set_owner", "registry", owner_id, f"Owner changed to {owner_id}")

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def set_contract(
        self,
        caller_id: str,
        account_id: str,
        cid: str,
        code_hash: str,
        lang: str,
        entry_point: str,
        builder_image: str,
        github: Optional[GithubData] = None,
    ) -> ContractRecord:
        """Register or overwrite the build record for ``account_id``.

        Votes and comments of an existing record survive the overwrite.
        """
        authorize(caller_id, self.get_owner())
        validate_account_id(account_id)

        with self._transaction():
            record = self._contracts.upsert(
                account_id,
                cid=cid,
                code_hash=code_hash,
                lang=lang,
                entry_point=entry_point,
                builder_image=builder_image,
                github=github,
            )
            self._commit(
                caller_id,
                "set_contract",
                "contract",
                account_id,
                f"Contract {account_id} added",
                {"cid": cid, "code_hash": code_hash},
            )
        return record

    def publish(self, caller_id: str, manifest_path: str | Path) -> ContractRecord:
        """Register a contract from a YAML build manifest."""
        manifest = load_manifest(manifest_path)
        return self.set_contract(
            caller_id,
            manifest.account_id,
            cid=manifest.cid,
            code_hash=manifest.code_hash,
            lang=manifest.lang,
            entry_point=manifest.entry_point,
            builder_image=manifest.builder_image,
            github=manifest.github,
        )

    def purge_contract(self, caller_id: str, account_id: str) -> None:
        """Remove a record. Its comments stay in the log; absent ids are a no-op."""
        authorize(caller_id, self.get_owner())
        if account_id not in self._contracts:
            return

        with self._transaction():
            self._contracts.remove(account_id)
            self._commit(caller_id, "purge_contract", "contract", account_id, f"Contract {account_id} removed")

    def get_contract(self, account_id: str) -> Optional[ContractRecord]:
        self.get_owner()
        return self._contracts.get(account_id)

    def get_contracts(self, from_index: int, limit: int) -> Page:
        """Return one window of all records; ``pages`` counts the whole store."""
        self.get_owner()
        return pager.paginate(
            self._contracts.iterate(), self._contracts.count(), from_index, limit
        )

    def search(self, key: str, from_index: int, limit: int) -> Page:
        """Return one window of the records whose account id contains ``key``."""
        self.get_owner()
        return pager.search(self._contracts.iterate(), key, from_index, limit)

    def contract_count(self) -> int:
        self.get_owner()
        return self._contracts.count()

    # ------------------------------------------------------------------
    # Engagement
    # ------------------------------------------------------------------

    def vote(self, caller_id: str, account_id: str, kind: ReactionKind | str) -> Reaction:
        """Cast or change ``caller_id``'s vote on a record."""
        self.get_owner()
        kind = _parse_kind(kind, VOTE_KINDS)
        self._require_contract(account_id)

        with self._transaction():
            record = self._require_contract(account_id)
            reaction = record.votes.upsert(caller_id, self._clock(), kind)
            self._commit(caller_id, "vote", "contract", account_id, f"{caller_id} voted {kind.value} on {account_id}")
        return reaction

    def add_comment(self, caller_id: str, account_id: str, description: str) -> Comment:
        """Append a comment to the log and link it into the record."""
        self.get_owner()
        _require_text(description)
        self._require_contract(account_id)

        with self._transaction():
            record = self._require_contract(account_id)
            comment = self._comments.append(caller_id, self._clock(), description)
            record.comments.append(comment.id)
            self._commit(caller_id, "add_comment", "contract", account_id, f"Comment {comment.id} added to {account_id}")
        return comment

    def reply_to_comment(self, caller_id: str, comment_id: int, description: str) -> Comment:
        """Append a comment to the log and link it into its parent comment."""
        self.get_owner()
        _require_text(description)
        self._comments.get(comment_id)

        with self._transaction():
            parent = self._comments.get(comment_id)
            reply = self._comments.append(caller_id, self._clock(), description)
            parent.replies.append(reply.id)
            self._commit(caller_id, "reply", "comment", str(comment_id), f"Comment {reply.id} added in reply to {comment_id}")
        return reply

    def like_comment(
        self, caller_id: str, comment_id: int, kind: ReactionKind | str = ReactionKind.like
    ) -> Reaction:
        """Record ``caller_id``'s like on a comment (one per author).

        ``like`` is the only reaction kind comments accept.
        """
        self.get_owner()
        kind = _parse_kind(kind, COMMENT_REACTION_KINDS)
        self._comments.get(comment_id)

        with self._transaction():
            comment = self._comments.get(comment_id)
            reaction = comment.likes.upsert(caller_id, self._clock(), kind)
            self._commit(caller_id, "like_comment", "comment", str(comment_id), f"{caller_id} liked comment {comment_id}")
        return reaction

    def get_comment(self, comment_id: int) -> Comment:
        self.get_owner()
        return self._comments.get(comment_id)

    def get_comments(self, account_id: str) -> list[Comment]:
        """Return a record's comments in append order; empty if the record is absent."""
        self.get_owner()
        record = self._contracts.get(account_id)
        if record is None:
            return []
        return self._comments.resolve(record.comments)

    def comment_count(self) -> int:
        self.get_owner()
        return len(self._comments)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_contract(self, account_id: str) -> ContractRecord:
        record = self._contracts.get(account_id)
        if record is None:
            raise NotFound(f"Contract {account_id} not found")
        return record

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Restore the state from before the block if anything in it raises.

        The state file is rewritten too when the block already saved it.
        """
        before = self._state_to_dict()
        self._written = False
        try:
            yield
        except BaseException:
            self._apply_state(before)
            if self._written:
                self._save_state()
            raise
        finally:
            self._written = False

    def _commit(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self._save_state()
        self._written = True
        if self.audit is not None:
            self.audit.log_event(
                actor=actor,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                message=message,
                details=details,
            )

    def _state_to_dict(self) -> dict:
        return {
            "owner_id": self._owner_id,
            # A list of pairs keeps the iteration order explicit
            "contracts": [
                [account_id, _record_to_dict(record)]
                for account_id, record in self._contracts.iterate()
            ],
            "comments": [_comment_to_dict(c) for c in self._comments],
        }

    def _apply_state(self, data: dict) -> None:
        contracts = RecordStore()
        for account_id, record_data in data.get("contracts", []):
            contracts.put(account_id, _dict_to_record(record_data))
        self._owner_id = data["owner_id"]
        self._contracts = contracts
        self._comments = CommentLog([_dict_to_comment(c) for c in data.get("comments", [])])

    def _load_state(self) -> None:
        if self.state_path is None or not self.state_path.exists():
            return
        with open(self.state_path) as f:
            self._apply_state(json.load(f))

    def _save_state(self) -> None:
        if self.state_path is None:
            return
        tmp_path = self.state_path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(self._state_to_dict(), f, indent=2)
        tmp_path.replace(self.state_path)



def _parse_kind(kind: ReactionKind | str, allowed: tuple[ReactionKind, ...]) -> ReactionKind:
    try:
        kind = ReactionKind(kind)
    except ValueError:
        raise InvalidArgument(f"Unknown reaction kind: {kind!r}") from None
    if kind not in allowed:
        raise InvalidArgument(f"Reaction must be one of: {', '.join(k.value for k in allowed)}")
    return kind


def _require_text(description: str) -> None:
    if not description or not description.strip():
        raise InvalidArgument("Comment text must not be empty")


def _reactions_to_list(reactions: ReactionSet) -> list[dict]:
    return [
        {"author_id": r.author_id, "timestamp": r.timestamp, "kind": r.kind.value}
        for r in reactions
    ]


def _list_to_reactions(data: list[dict]) -> ReactionSet:
    return ReactionSet(
        [Reaction(author_id=d["author_id"], timestamp=d["timestamp"], kind=d["kind"]) for d in data]
    )


def _record_to_dict(record: ContractRecord) -> dict:
    return {
        "cid": record.cid,
        "code_hash": record.code_hash,
        "lang": record.lang,
        "entry_point": record.entry_point,
        "builder_image": record.builder_image,
        "github": (
            {
                "owner": record.github.owner,
                "repo": record.github.repo,
                "sha": record.github.sha,
            }
            if record.github
            else None
        ),
        "votes": _reactions_to_list(record.votes),
        "comments": list(record.comments),
    }


def _dict_to_record(data: dict) -> ContractRecord:
    github_data = data.get("github")
    return ContractRecord(
        cid=data["cid"],
        code_hash=data["code_hash"],
        lang=data["lang"],
        entry_point=data["entry_point"],
        builder_image=data["builder_image"],
        github=GithubData(**github_data) if github_data else None,
        votes=_list_to_reactions(data.get("votes", [])),
        comments=list(data.get("comments", [])),
    )


def _comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "author_id": comment.author_id,
        "timestamp": comment.timestamp,
        "description": comment.description,
        "likes": _reactions_to_list(comment.likes),
        "replies": list(comment.replies),
    }


def _dict_to_comment(data: dict) -> Comment:
    return Comment(
        id=data["id"],
        author_id=data["author_id"],
        timestamp=data["timestamp"],
        description=data["description"],
        likes=_list_to_reactions(data.get("likes", [])),
        replies=list(data.get("replies", [])),
    )
