"""Request dependencies shared by the route modules.

Identity comes from the ``X-User-Id`` header set by the fronting auth layer.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from writequest.config.app_config import AppConfig, load_app_config
from writequest.db.users_repository import Role, UserRecord, get_user_by_id
from writequest.llm.client import LLMClient, LLMConfig

logger = structlog.get_logger(__name__)


def get_app_config() -> AppConfig:
    """Application configuration."""
    return load_app_config()


def get_llm_client(
    request: Request,
    config: AppConfig = Depends(get_app_config),
) -> LLMClient:
    """LLM client shared by the whole app, created on first use."""
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        client = LLMClient(LLMConfig.from_settings(config.llm))
        request.app.state.llm_client = client
    return client


def get_today() -> date:
    """Calendar day used for streaks and challenges."""
    return date.today()


def get_current_user(x_user_id: int | None = Header(default=None)) -> UserRecord:
    """The user making the request.

    Raises:
        HTTPException: 401 if the header is missing or names no user
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = get_user_by_id(x_user_id)
    if user is None:
        logger.warning("auth.unknown_user", user_id=x_user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return user


def require_role(*roles: Role) -> Callable[..., UserRecord]:
    """Dependency that admits only the given roles (admins always pass)."""

    def dependency(user: UserRecord = Depends(get_current_user)) -> UserRecord:
        if user.role != "admin" and user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(roles)}",
            )
        return user

    return dependency
