"""Pagination and search over the record store's iteration order."""

from __future__ import annotations

from itertools import islice
from typing import Iterable

from sourcescan.registry.errors import InvalidArgument
from sourcescan.registry.models import ContractRecord, Page

# Network suffixes ignored when matching account ids against a search key.
ACCOUNT_SUFFIXES = (".testnet", ".near")


def compute_page_count(total: int, limit: int) -> int:
    """Return ``ceil(total / limit)``.

    Raises ``InvalidArgument`` for a non-positive ``limit``.
    """
    if limit <= 0:
        raise InvalidArgument(f"limit must be positive, got {limit}")
    if total < 0:
        raise InvalidArgument(f"total must not be negative, got {total}")
    return (total + limit - 1) // limit


def normalize_account_id(account_id: str) -> str:
    """Lowercase an account id and strip the known network suffixes."""
    normalized = account_id.lower()
    for suffix in ACCOUNT_SUFFIXES:
        normalized = normalized.replace(suffix, "")
    return normalized


def matches(account_id: str, key: str) -> bool:
    return key.lower() in normalize_account_id(account_id)


def _window(
    items: Iterable[tuple[str, ContractRecord]], from_index: int, limit: int
) -> list[tuple[str, ContractRecord]]:
    if from_index < 0:
        raise InvalidArgument(f"from_index must not be negative, got {from_index}")
    return list(islice(items, from_index, from_index + limit))


def paginate(
    items: Iterable[tuple[str, ContractRecord]], total: int, from_index: int, limit: int
) -> Page:
    """Window ``items`` with skip/take; the page count covers all ``total`` items."""
    pages = compute_page_count(total, limit)
    return Page(entries=_window(items, from_index, limit), pages=pages)


def search(
    items: Iterable[tuple[str, ContractRecord]], key: str, from_index: int, limit: int
) -> Page:
    """Filter ``items`` by normalized substring match, then window the result.

    The page count is computed over the filtered result.
    """
    found = [(account_id, record) for account_id, record in items if matches(account_id, key)]
    return paginate(found, len(found), from_index, limit)
