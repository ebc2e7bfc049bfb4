"""Vector index inspection endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..container import Services, get_services
from ..security import verify_security_api_key
from ..utils.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/vector-index",
    tags=["Vector index"],
    dependencies=[Depends(verify_security_api_key)],
)


@router.get("/status")
async def index_status(services: Services = Depends(get_services)) -> Dict[str, Any]:
    """Connection state and collection summary."""
    try:
        status = await services.index.get_status()
    except ServiceUnavailableError as e:
        logger.warning(f"Vector index status check failed: {e.message}")
        return {"success": False, "connected": False, "collection": services.index.collection_name, "error": e.message}
    return {"success": True, **status}


@router.get("/points")
async def list_points(
    limit: int = Query(10, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    """Page through stored catalog points (payloads only)."""
    page = await services.index.scroll(limit=limit, offset=offset)
    return {"success": True, **page}
