from typing import Optional
import hmac
from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader
import structlog

from services.config import get_settings

logger = structlog.get_logger()
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)

UNAUTHORIZED_DETAIL = {
    "error": "Unauthorized",
    "message": "Valid API key required"
}


def verify_api_key(api_key: Optional[str]) -> bool:
    expected = get_settings().api_key
    if not api_key or not expected:
        return False
    return hmac.compare_digest(api_key.encode(), expected.encode())


async def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Reject requests whose `x-api-key` header does not match the configured key."""
    if not verify_api_key(api_key):
        logger.warning("Rejected request with invalid API key", key_present=bool(api_key))
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_DETAIL)
    return api_key
