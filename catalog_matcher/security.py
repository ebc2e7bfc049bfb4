import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)


API_KEY_NAME = "X-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


async def verify_security_api_key(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),
):
    """Checks the shared X-Key header when an API key is configured; open otherwise."""
    expected = request.app.state.settings.api.api_key.get_secret_value()
    if not expected:
        return
    if api_key is None:
        raise HTTPException(status_code=403, detail="No API key supplied")
    if not secrets.compare_digest(api_key, expected):
        logger.warning(f"Rejected request to {request.url.path} with an invalid API key")
        raise HTTPException(status_code=403, detail="Invalid API key")
