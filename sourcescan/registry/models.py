"""Registry data models — contract records, comments, and result pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sourcescan.registry.reactions import Reaction, ReactionKind, ReactionSet

__all__ = [
    "Comment",
    "ContractRecord",
    "GithubData",
    "Page",
    "Reaction",
    "ReactionKind",
    "ReactionSet",
]


@dataclass
class GithubData:
    """Pointer to the source revision a build was produced from."""

    owner: str
    repo: str
    sha: str

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/tree/{self.sha}"


@dataclass
class ContractRecord:
    """A verified build of the code deployed to one account."""

    # Build description
    cid: str
    code_hash: str
    lang: str
    entry_point: str
    builder_image: str
    github: Optional[GithubData] = None

    # Engagement, carried across re-registration
    votes: ReactionSet = field(default_factory=ReactionSet)
    comments: list[int] = field(default_factory=list)


@dataclass
class Comment:
    """An entry in the global comment log.

    Only ``likes`` and ``replies`` change after the comment is appended.
    """

    id: int
    author_id: str
    timestamp: int
    description: str
    likes: ReactionSet = field(default_factory=ReactionSet)
    replies: list[int] = field(default_factory=list)


@dataclass
class Page:
    """One window of a listing or search, with the page count of the full result."""

    entries: list[tuple[str, ContractRecord]] = field(default_factory=list)
    pages: int = 0
