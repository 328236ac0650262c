"""Registry router -- ownership, contract records, votes and comments."""

from __future__ import annotations

import os
from typing import Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sourcescan.registry.errors import (
    AlreadyInitialized,
    InvalidArgument,
    NotFound,
    NotInitialized,
    RegistryError,
    Unauthorized,
)
from sourcescan.registry.local_registry import SourceScanRegistry
from sourcescan.registry.models import Comment, ContractRecord, GithubData, Page, ReactionSet
from sourcescan.security.audit_log import AuditLogger
from web.backend.app.middleware.auth import get_caller_id
from web.backend.app.models.api import (
    CommentRequest,
    CommentResponse,
    ContractPageResponse,
    ContractResponse,
    GithubDataModel,
    OwnerResponse,
    ReactionResponse,
    SetContractRequest,
    SetOwnerRequest,
    VoteRequest,
)

router = APIRouter(prefix="/api/registry", tags=["registry"])

T = TypeVar("T")

_STATUS_FOR_ERROR: dict[type[RegistryError], int] = {
    Unauthorized: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    AlreadyInitialized: status.HTTP_409_CONFLICT,
    NotInitialized: status.HTTP_409_CONFLICT,
    InvalidArgument: 422,
}


def get_registry() -> SourceScanRegistry:
    """Return a registry backed by the configured state directory."""
    registry_dir = os.environ.get("SOURCESCAN_REGISTRY_DIR", ".sourcescan_registry")
    return SourceScanRegistry(registry_dir, audit=AuditLogger())


def _call(action: Callable[[], T]) -> T:
    """Run a registry operation, translating registry errors to HTTP errors."""
    try:
        return action()
    except RegistryError as exc:
        code = _STATUS_FOR_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
        raise HTTPException(status_code=code, detail=str(exc))


# ---------------------------------------------------------------------------
# Response conversion
# ---------------------------------------------------------------------------


def _reactions_response(reactions: ReactionSet) -> list[ReactionResponse]:
    return [
        ReactionResponse(author_id=r.author_id, timestamp=str(r.timestamp), kind=r.kind.value)
        for r in reactions
    ]


def _contract_response(account_id: str, record: ContractRecord) -> ContractResponse:
    """Convert a ContractRecord dataclass to a Pydantic response model."""
    gh = record.github
    return ContractResponse(
        account_id=account_id,
        cid=record.cid,
        code_hash=record.code_hash,
        lang=record.lang,
        entry_point=record.entry_point,
        builder_image=record.builder_image,
        github=GithubDataModel(owner=gh.owner, repo=gh.repo, sha=gh.sha) if gh else None,
        votes=_reactions_response(record.votes),
        comments=list(record.comments),
        score=record.votes.score,
    )


def _page_response(page: Page) -> ContractPageResponse:
    return ContractPageResponse(
        entries=[_contract_response(a, r) for a, r in page.entries],
        pages=page.pages,
    )


def _comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        author_id=comment.author_id,
        timestamp=str(comment.timestamp),
        description=comment.description,
        likes=_reactions_response(comment.likes),
        replies=list(comment.replies),
    )


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


@router.post("/init", response_model=OwnerResponse, summary="Initialize the registry")
async def initialize(
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Create empty registry state owned by the caller."""
    _call(lambda: reg.initialize(caller_id))
    return OwnerResponse(owner_id=caller_id)


@router.get("/owner", response_model=OwnerResponse, summary="Get the owner")
async def get_owner(reg: SourceScanRegistry = Depends(get_registry)):
    return OwnerResponse(owner_id=_call(reg.get_owner))


@router.put("/owner", response_model=OwnerResponse, summary="Transfer ownership")
async def set_owner(
    body: SetOwnerRequest,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Transfer ownership (owner only)."""
    _call(lambda: reg.set_owner(caller_id, body.owner_id))
    return OwnerResponse(owner_id=body.owner_id)


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


@router.get("/contracts", response_model=ContractPageResponse, summary="List contracts")
async def list_contracts(
    from_index: int = Query(0, description="Offset of the first record"),
    limit: int = Query(10, description="Records per page"),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """List one page of registered contracts."""
    return _page_response(_call(lambda: reg.get_contracts(from_index, limit)))


@router.get("/contracts/search", response_model=ContractPageResponse, summary="Search contracts")
async def search_contracts(
    key: str = Query("", description="Substring of the account id"),
    from_index: int = Query(0, description="Offset of the first match"),
    limit: int = Query(10, description="Matches per page"),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Search contracts by account id, ignoring case and network suffixes."""
    return _page_response(_call(lambda: reg.search(key, from_index, limit)))


@router.get("/contracts/{account_id}", response_model=ContractResponse, summary="Get a contract")
async def get_contract(account_id: str, reg: SourceScanRegistry = Depends(get_registry)):
    record = _call(lambda: reg.get_contract(account_id))
    if record is None:
        raise HTTPException(status_code=404, detail=f"Contract '{account_id}' not found")
    return _contract_response(account_id, record)


@router.put("/contracts/{account_id}", response_model=ContractResponse, summary="Register a contract")
async def set_contract(
    account_id: str,
    body: SetContractRequest,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Register or overwrite a contract (owner only).

    Votes and comments of an existing record are kept.
    """
    github = GithubData(**body.github.model_dump()) if body.github else None
    record = _call(
        lambda: reg.set_contract(
            caller_id,
            account_id,
            cid=body.cid,
            code_hash=body.code_hash,
            lang=body.lang,
            entry_point=body.entry_point,
            builder_image=body.builder_image,
            github=github,
        )
    )
    return _contract_response(account_id, record)


@router.delete("/contracts/{account_id}", summary="Purge a contract")
async def purge_contract(
    account_id: str,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Remove a contract (owner only). Removing an unknown account succeeds."""
    _call(lambda: reg.purge_contract(caller_id, account_id))
    return {"status": "removed", "account_id": account_id}


# ---------------------------------------------------------------------------
# Votes and comments
# ---------------------------------------------------------------------------


@router.post(
    "/contracts/{account_id}/votes",
    response_model=ReactionResponse,
    summary="Vote on a contract",
)
async def vote(
    account_id: str,
    body: VoteRequest,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    """Cast or change the caller's vote."""
    r = _call(lambda: reg.vote(caller_id, account_id, body.kind))
    return ReactionResponse(author_id=r.author_id, timestamp=str(r.timestamp), kind=r.kind.value)


@router.get(
    "/contracts/{account_id}/comments",
    response_model=list[CommentResponse],
    summary="List comments on a contract",
)
async def list_comments(account_id: str, reg: SourceScanRegistry = Depends(get_registry)):
    return [_comment_response(c) for c in _call(lambda: reg.get_comments(account_id))]


@router.post(
    "/contracts/{account_id}/comments",
    response_model=CommentResponse,
    summary="Comment on a contract",
)
async def add_comment(
    account_id: str,
    body: CommentRequest,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    return _comment_response(_call(lambda: reg.add_comment(caller_id, account_id, body.description)))


@router.get("/comments/{comment_id}", response_model=CommentResponse, summary="Get a comment")
async def get_comment(comment_id: int, reg: SourceScanRegistry = Depends(get_registry)):
    return _comment_response(_call(lambda: reg.get_comment(comment_id)))


@router.post(
    "/comments/{comment_id}/replies",
    response_model=CommentResponse,
    summary="Reply to a comment",
)
async def reply_to_comment(
    comment_id: int,
    body: CommentRequest,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    return _comment_response(
        _call(lambda: reg.reply_to_comment(caller_id, comment_id, body.description))
    )


@router.post(
    "/comments/{comment_id}/likes",
    response_model=ReactionResponse,
    summary="Like a comment",
)
async def like_comment(
    comment_id: int,
    caller_id: str = Depends(get_caller_id),
    reg: SourceScanRegistry = Depends(get_registry),
):
    r = _call(lambda: reg.like_comment(caller_id, comment_id))
    return ReactionResponse(author_id=r.author_id, timestamp=str(r.timestamp), kind=r.kind.value)
