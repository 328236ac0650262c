"""Pydantic models for API request/response serialization.

These models mirror the SourceScan dataclasses and provide proper JSON
serialization for the FastAPI endpoints. Timestamps are nanoseconds since
the epoch, sent as decimal strings.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Registry models
# ---------------------------------------------------------------------------


class GithubDataModel(BaseModel):
    """Mirrors sourcescan.registry.models.GithubData."""

    owner: str
    repo: str
    sha: str


class ReactionResponse(BaseModel):
    """Mirrors sourcescan.registry.reactions.Reaction."""

    author_id: str
    timestamp: str
    kind: str


class ContractResponse(BaseModel):
    """Mirrors sourcescan.registry.models.ContractRecord."""

    account_id: str
    cid: str
    code_hash: str
    lang: str
    entry_point: str
    builder_image: str
    github: Optional[GithubDataModel] = None
    votes: list[ReactionResponse] = Field(default_factory=list)
    comments: list[int] = Field(default_factory=list)
    score: int = 0


class ContractPageResponse(BaseModel):
    """Mirrors sourcescan.registry.models.Page."""

    entries: list[ContractResponse] = Field(default_factory=list)
    pages: int = 0


class SetContractRequest(BaseModel):
    """Request body for registering or overwriting a contract."""

    cid: str
    code_hash: str
    lang: str
    entry_point: str
    builder_image: str
    github: Optional[GithubDataModel] = None


class OwnerResponse(BaseModel):
    owner_id: str


class SetOwnerRequest(BaseModel):
    owner_id: str


# ---------------------------------------------------------------------------
# Engagement models
# ---------------------------------------------------------------------------


class VoteRequest(BaseModel):
    """Request body for voting; ``kind`` is ``upvote`` or ``downvote``."""

    kind: str


class CommentRequest(BaseModel):
    description: str


class CommentResponse(BaseModel):
    """Mirrors sourcescan.registry.models.Comment."""

    id: int
    author_id: str
    timestamp: str
    description: str
    likes: list[ReactionResponse] = Field(default_factory=list)
    replies: list[int] = Field(default_factory=list)
