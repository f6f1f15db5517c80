from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from .core import get_settings


async def require_admin_key(
    api_key: str | None = Header(None, alias="X-API-Key"),
) -> None:
    """FastAPI dependency that raises 401 unless *api_key* matches ``ADMIN_API_KEY``.

    With no ``ADMIN_API_KEY`` configured the admin routes stay open, which is
    how the dashboard runs behind the site's own auth.
    """
    expected = get_settings().ADMIN_API_KEY
    if not expected:
        return
    if api_key is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
    if not hmac.compare_digest(api_key.encode(), expected.encode()):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
