"""Per-author reactions (votes and likes) on records and comments.

A reaction is identified by its author alone: two reactions from the same
author are the same element whatever their kind or timestamp. The set is
therefore backed by a mapping from author identity to reaction, and a
re-vote replaces the stored entry instead of being dropped as a duplicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class ReactionKind(str, Enum):
    """Closed set of reaction kinds."""

    upvote = "upvote"
    downvote = "downvote"
    like = "like"


@dataclass(frozen=True, eq=False)
class Reaction:
    """A single engagement marker left by one author."""

    author_id: str
    timestamp: int
    kind: ReactionKind = ReactionKind.like

    def __post_init__(self) -> None:
        if isinstance(self.kind, str) and not isinstance(self.kind, ReactionKind):
            object.__setattr__(self, "kind", ReactionKind(self.kind))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reaction):
            return NotImplemented
        return self.author_id == other.author_id

    def __hash__(self) -> int:
        return hash(self.author_id)


class ReactionSet:
    """Set of reactions holding at most one entry per author."""

    def __init__(self, reactions: Optional[list[Reaction]] = None) -> None:
        self._by_author: dict[str, Reaction] = {}
        for reaction in reactions or []:
            self._by_author[reaction.author_id] = reaction

    def upsert(self, author_id: str, timestamp: int, kind: ReactionKind) -> Reaction:
        """Insert a reaction, or replace the author's existing one.

        Returns the reaction now stored for ``author_id``.
        """
        reaction = Reaction(author_id=author_id, timestamp=timestamp, kind=kind)
        self._by_author[author_id] = reaction
        return reaction

    def get(self, author_id: str) -> Optional[Reaction]:
        return self._by_author.get(author_id)

    def tally(self) -> dict[ReactionKind, int]:
        """Count reactions per kind."""
        counts = {kind: 0 for kind in ReactionKind}
        for reaction in self._by_author.values():
            counts[reaction.kind] += 1
        return counts

    @property
    def score(self) -> int:
        """Upvotes minus downvotes."""
        counts = self.tally()
        return counts[ReactionKind.upvote] - counts[ReactionKind.downvote]

    def __iter__(self) -> Iterator[Reaction]:
        return iter(list(self._by_author.values()))

    def __len__(self) -> int:
        return len(self._by_author)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Reaction):
            return item.author_id in self._by_author
        return item in self._by_author

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReactionSet):
            return NotImplemented
        return self._by_author == other._by_author

    def __repr__(self) -> str:
        return f"ReactionSet({list(self._by_author.values())!r})"
