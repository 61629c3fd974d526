"""API key check shared by the book and goal routers."""

import secrets

from fastapi import Header, HTTPException, Query

from app.config import settings


def _extract_key(x_api_key: str | None, authorization: str | None, api_key: str | None) -> str | None:
    if x_api_key is not None:
        return x_api_key
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip()
    # EventSource clients cannot set headers, so the stream passes it in the query
    return api_key


async def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    authorization: str | None = Header(default=None),
    api_key: str | None = Query(default=None, include_in_schema=False),
) -> str:
    """Accept the key from X-API-Key, a Bearer token or ``?api_key=``.

    With READMATE_API_KEY unset every request passes.
    """
    expected = settings.readmate_api_key
    if expected is None:
        return ""

    key = _extract_key(x_api_key, authorization, api_key)
    if key is None or not secrets.compare_digest(key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return key
