import logging
import secrets
from typing import Optional

from fastapi import Header, Request

from team_board.config import Settings
from team_board.domain.errors import Unauthorized

logger = logging.getLogger("board.auth")


def match_api_key(api_key: Optional[str], settings: Settings) -> Optional[str]:
    """Return "manager" or "team" for a recognised key, otherwise None."""
    if not settings.api_secret_key:
        logger.error(
            "auth.misconfigured",
            extra={"category": "auth", "event": "auth.misconfigured", "missing": "API_SECRET_KEY"},
        )
        return None
    if not api_key:
        return None
    if secrets.compare_digest(api_key.encode(), settings.api_secret_key.encode()):
        return "manager"
    if secrets.compare_digest(api_key.encode(), settings.team_api_key.encode()):
        return "team"
    return None


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
) -> str:
    role = match_api_key(x_api_key, request.app.state.settings)
    if role is None:
        logger.warning(
            "auth.rejected",
            extra={
                "category": "auth",
                "event": "auth.rejected",
                "method": request.method,
                "path": request.url.path,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
        raise Unauthorized()
    return role
