"""Tests for pagination and search helpers."""

import pytest

from sourcescan.registry.errors import InvalidArgument
from sourcescan.registry.models import ContractRecord
from sourcescan.registry.pager import (
    compute_page_count,
    normalize_account_id,
    paginate,
    search,
)


def _items(*account_ids):
    return [
        (a, ContractRecord(cid=a, code_hash="h", lang="rust", entry_point="main", builder_image="img"))
        for a in account_ids
    ]


@pytest.mark.parametrize(
    "total,limit,expected",
    [(3, 2, 2), (4, 2, 2), (0, 5, 0), (1, 1, 1), (10, 3, 4), (5, 100, 1)],
)
def test_compute_page_count(total, limit, expected):
    assert compute_page_count(total, limit) == expected


def test_compute_page_count_rejects_zero_limit():
    with pytest.raises(InvalidArgument):
        compute_page_count(3, 0)
    with pytest.raises(InvalidArgument):
        compute_page_count(3, -1)


def test_normalize_account_id():
    assert normalize_account_id("Account1.TESTNET") == "account1"
    assert normalize_account_id("app.near") == "app"
    assert normalize_account_id("sub.app.testnet") == "sub.app"


def test_paginate_windows_after_counting():
    items = _items("a.near", "b.near", "c.near")
    page = paginate(items, len(items), 1, 1)
    assert [a for a, _ in page.entries] == ["b.near"]
    assert page.pages == 3


def test_paginate_past_the_end_is_empty():
    items = _items("a.near", "b.near")
    page = paginate(items, len(items), 5, 2)
    assert page.entries == []
    assert page.pages == 1


def test_paginate_rejects_negative_offset():
    with pytest.raises(InvalidArgument):
        paginate(_items("a.near"), 1, -1, 2)


def test_search_counts_pages_over_filtered_result():
    items = _items("account1.testnet", "account2.testnet", "other.testnet", "account3.near")
    page = search(items, "Account", 2, 2)
    assert [a for a, _ in page.entries] == ["account3.near"]
    assert page.pages == 2


def test_search_single_match():
    page = search(_items("account1.testnet", "account2.testnet"), "account1", 0, 10)
    assert [a for a, _ in page.entries] == ["account1.testnet"]


def test_search_does_not_match_suffix():
    assert search(_items("app.testnet"), "testnet", 0, 10).entries == []
