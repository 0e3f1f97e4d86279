"""
Caller identity.

Authentication happens upstream; the gateway forwards the authenticated
user id in the X-User-Id header. Endpoints only compare it to binder
ownership.
"""

from typing import Annotated

from fastapi import Header

from bindery.models.failure import UnauthorizedError


async def get_caller_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user id")] = None,
) -> str:
    """Dependency that yields the caller's user id or rejects the request."""
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError("Missing caller identity", status_code=401)
    return x_user_id.strip()
