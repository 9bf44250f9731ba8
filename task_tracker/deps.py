"""Dependency injection helpers for FastAPI."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Header, HTTPException, status

from .config import Settings, settings
from .models.task import UserIdentity
from .services import task_service as task_service_module
from .services.task_service import TaskService


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return settings


def get_task_service() -> TaskService:
    """Get the initialized task service."""
    service = task_service_module.get_task_service()
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Task service not initialized",
        )
    return service


def get_current_user(
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_username: Annotated[Optional[str], Header()] = None,
) -> UserIdentity:
    """Resolve the caller identity placed on the request by the auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return UserIdentity(id=x_user_id.strip(), username=x_username)
