"""Prompt version endpoint handlers."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ...core.database import get_database_session
from ...core.exceptions import ValidationError
from ...models.requests import parse_request
from ...services.auth_client import AuthClient
from ...services.version_service import VersionService
from ...services.version_store import SqlVersionStore, VersionStore

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["prompt-versions"])


def get_auth_client() -> AuthClient:
    """Get auth client dependency."""
    return AuthClient()


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth_client: AuthClient = Depends(get_auth_client),
) -> Dict[str, Any]:
    """Resolve the caller from the ``Authorization`` header."""
    user = await auth_client.get_user(authorization)
    structlog.contextvars.bind_contextvars(user_id=user["id"])
    return user


async def get_version_store(
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_database_session),
) -> VersionStore:
    """Get version store dependency bound to the caller."""
    return SqlVersionStore(db, user_id=user["id"])


@router.post("/prompt-versions",
             response_model=Dict[str, Any],
             status_code=status.HTTP_200_OK,
             summary="Prompt version actions",
             description="""
Single entry point for prompt versioning. The JSON body names an `action`
and carries that action's parameters:

- `commit` - `prompt_row_id`, optional `commit_message` (max 500), `tag_name`
- `rollback` - `prompt_row_id`, `version_id`, optional `create_backup`
- `history` - `prompt_row_id`, optional `limit` (1-100) and `offset`
- `diff` - `prompt_row_id`, optional `version_b` (base) and `version_a` (target)
- `tag` - `version_id`, optional `tag_name` (null clears)
- `pin` - `version_id`, optional `is_pinned`
- `preview` - `version_id`
- `cleanup` - optional `max_age_days`, `min_versions`

Failures return `{"error": ..., "code": ...}`.
             """,
             responses={
                 400: {"description": "Invalid input or client error"},
                 401: {"description": "Missing or invalid credentials"},
                 500: {"description": "Server error"},
                 504: {"description": "Request timeout"},
             })
async def prompt_versions(
    request: Request,
    store: VersionStore = Depends(get_version_store),
) -> Dict[str, Any]:
    """Validate and run a prompt version action.

    Args:
        request: FastAPI request object
        store: Version store dependency

    Returns:
        Action-specific JSON result
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON") from e

    version_request = parse_request(body)
    logger.info("Prompt version action received", action=version_request.action)

    service = VersionService(store)
    return await service.handle(version_request, started_at=getattr(request.state, "started_at", None))
