"""Global append-only comment log.

Comments are addressed by their position in the log. Ids are dense,
zero-based and never reused; records and parent comments hold ids only.
"""

from __future__ import annotations

from typing import Iterator, Optional

from sourcescan.registry.errors import NotFound
from sourcescan.registry.models import Comment


class CommentLog:
    """Arena of comments indexed by sequence id."""

    def __init__(self, comments: Optional[list[Comment]] = None) -> None:
        self._entries: list[Comment] = []
        for comment in comments or []:
            if comment.id != len(self._entries):
                raise ValueError(
                    f"Comment log is not dense: expected id {len(self._entries)}, got {comment.id}"
                )
            self._entries.append(comment)

    def append(self, author_id: str, timestamp: int, description: str) -> Comment:
        """Append a comment and return it; its id is the log length before the call."""
        comment = Comment(
            id=len(self._entries),
            author_id=author_id,
            timestamp=timestamp,
            description=description,
        )
        self._entries.append(comment)
        return comment

    def get(self, comment_id: int) -> Comment:
        if comment_id < 0 or comment_id >= len(self._entries):
            raise NotFound(f"Comment {comment_id} not found")
        return self._entries[comment_id]

    def resolve(self, comment_ids: list[int]) -> list[Comment]:
        """Fetch several comments, preserving the order of ``comment_ids``."""
        return [self.get(i) for i in comment_ids]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Comment]:
        return iter(self._entries)
