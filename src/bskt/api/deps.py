"""Request dependencies: service lookup and API key check."""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from bskt.services.container import Services

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    """Service graph attached to the app at creation."""
    return request.app.state.services


async def require_api_key(
    x_api_key: Optional[str] = Header(None),
    services: Services = Depends(get_services),
) -> bool:
    """Verify the X-API-Key header.

    If VALID_API_KEYS is not set, allows access (dev mode).
    """
    keys = services.settings.api_keys
    if not keys:
        return True

    if not x_api_key:
        raise HTTPException(status_code=401, detail="API key required")

    if x_api_key not in keys:
        logger.warning("Rejected request with invalid API key")
        raise HTTPException(status_code=403, detail="Invalid API key")

    return True
