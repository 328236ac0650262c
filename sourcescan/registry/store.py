"""Keyed store of contract records.

Iteration follows insertion order; overwriting a record keeps its position
and removing it drops it. The order is stable while nothing is written.
"""

from __future__ import annotations

from typing import Iterator, Optional

from sourcescan.registry.models import ContractRecord, GithubData


class RecordStore:
    """Mapping from account id to ``ContractRecord``."""

    def __init__(self) -> None:
        self._records: dict[str, ContractRecord] = {}

    def upsert(
        self,
        account_id: str,
        cid: str,
        code_hash: str,
        lang: str,
        entry_point: str,
        builder_image: str,
        github: Optional[GithubData] = None,
    ) -> ContractRecord:
        """Create or overwrite the record for ``account_id``.

        The descriptive fields are replaced; votes and comment ids of an
        existing record are carried over unchanged.
        """
        previous = self._records.get(account_id)
        record = ContractRecord(
            cid=cid,
            code_hash=code_hash,
            lang=lang,
            entry_point=entry_point,
            builder_image=builder_image,
            github=github,
        )
        if previous is not None:
            record.votes = previous.votes
            record.comments = previous.comments
        self._records[account_id] = record
        return record

    def put(self, account_id: str, record: ContractRecord) -> None:
        """Store a fully built record as-is (used when loading saved state)."""
        self._records[account_id] = record

    def remove(self, account_id: str) -> Optional[ContractRecord]:
        """Delete a record; absent ids are ignored. Returns the removed record."""
        return self._records.pop(account_id, None)

    def get(self, account_id: str) -> Optional[ContractRecord]:
        return self._records.get(account_id)

    def iterate(self) -> Iterator[tuple[str, ContractRecord]]:
        return iter(list(self._records.items()))

    def count(self) -> int:
        return len(self._records)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._records
