"""Owner gate for mutating registry operations.

The registry has a single owner. Caller identities are supplied by the host
(CLI option, HTTP header) and are trusted verbatim.
"""

from __future__ import annotations

from sourcescan.registry.errors import Unauthorized


def is_owner(caller_id: str, owner_id: str) -> bool:
    """Check whether ``caller_id`` is the registry owner."""
    return caller_id == owner_id


def authorize(caller_id: str, owner_id: str) -> None:
    """Validate that the caller is the owner.

    Raises ``Unauthorized`` otherwise. Usage in a registry operation::

        def purge_contract(self, caller_id, account_id):
            authorize(caller_id, self.get_owner())
            ...
    """
    if not is_owner(caller_id, owner_id):
        raise Unauthorized("Only owner can call this method")
