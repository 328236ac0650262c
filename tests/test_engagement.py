"""Tests for reaction sets and the comment log."""

import pytest

from sourcescan.registry.comments import CommentLog
from sourcescan.registry.errors import NotFound
from sourcescan.registry.models import Comment
from sourcescan.registry.reactions import Reaction, ReactionKind, ReactionSet


# --- Reactions ---


def test_reaction_equality_depends_on_author_only():
    a = Reaction(author_id="bob.near", timestamp=1, kind=ReactionKind.upvote)
    b = Reaction(author_id="bob.near", timestamp=2, kind=ReactionKind.downvote)
    c = Reaction(author_id="carol.near", timestamp=1, kind=ReactionKind.upvote)
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_reaction_kind_from_string():
    assert Reaction(author_id="bob.near", timestamp=1, kind="downvote").kind == ReactionKind.downvote


def test_upsert_replaces_kind_and_timestamp():
    votes = ReactionSet()
    votes.upsert("bob.near", 1, ReactionKind.upvote)
    votes.upsert("bob.near", 2, ReactionKind.downvote)
    votes.upsert("bob.near", 3, ReactionKind.downvote)

    assert len(votes) == 1
    stored = votes.get("bob.near")
    assert stored.kind == ReactionKind.downvote
    assert stored.timestamp == 3


def test_distinct_authors_accumulate():
    votes = ReactionSet()
    for i in range(4):
        votes.upsert(f"user{i}.near", i, ReactionKind.upvote)
    votes.upsert("user0.near", 10, ReactionKind.downvote)

    assert len(votes) == 4
    assert votes.tally()[ReactionKind.upvote] == 3
    assert votes.tally()[ReactionKind.downvote] == 1
    assert votes.score == 2
    assert "user3.near" in votes
    assert Reaction(author_id="user3.near", timestamp=0) in votes
    assert "nobody.near" not in votes


def test_reaction_set_from_list_keeps_last_per_author():
    votes = ReactionSet([
        Reaction("bob.near", 1, ReactionKind.upvote),
        Reaction("bob.near", 2, ReactionKind.downvote),
    ])
    assert len(votes) == 1
    assert votes.get("bob.near").kind == ReactionKind.downvote


# --- Comment log ---


def test_append_assigns_dense_ids():
    log = CommentLog()
    ids = [log.append("bob.near", t, f"comment {t}").id for t in range(5)]
    assert ids == [0, 1, 2, 3, 4]
    assert len(log) == 5
    assert log.get(3).description == "comment 3"
    assert [c.id for c in log.resolve([4, 0])] == [4, 0]


def test_get_unknown_id_fails():
    log = CommentLog()
    log.append("bob.near", 1, "only")
    with pytest.raises(NotFound):
        log.get(1)
    with pytest.raises(NotFound):
        log.get(-1)


def test_loading_a_sparse_log_fails():
    with pytest.raises(ValueError):
        CommentLog([Comment(id=1, author_id="bob.near", timestamp=1, description="gap")])
