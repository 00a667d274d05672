"""
app/auth.py

Optional shared API key check.

If API_KEY is not configured every request is allowed. Otherwise the key
must arrive as either:
  X-API-Key: <key>
  Authorization: Bearer <key>
Missing key → 401, wrong key → 403.
"""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request


def _provided_key(x_api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if x_api_key:
        return x_api_key
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
) -> None:
    expected = request.app.state.settings.api_key
    if not expected:
        return

    provided = _provided_key(x_api_key, authorization)
    if provided is None:
        raise HTTPException(status_code=401, detail="API key not provided")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(status_code=403, detail="Invalid API key")
