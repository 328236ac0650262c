"""Caller identity -- FastAPI dependencies for the ``X-Caller-Id`` header.

The host in front of the API authenticates callers and forwards their
account id in ``X-Caller-Id``. The value is trusted verbatim.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status


async def get_caller_id(
    x_caller_id: Optional[str] = Header(None, alias="X-Caller-Id"),
) -> str:
    """FastAPI dependency returning the caller's account id.

    Raises ``401 Unauthorized`` if the header is missing or blank.
    """
    if x_caller_id and x_caller_id.strip():
        return x_caller_id.strip()

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )
