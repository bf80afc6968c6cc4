"""Shared API dependencies for the chat hub, database and admin sessions."""

from typing import Annotated

from fastapi import Cookie, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from groupdeedo.db.session import get_db
from groupdeedo.realtime.hub import ChatHub
from groupdeedo.services.admin_auth import AdminAuthService, get_admin_auth_service

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_hub(request: Request) -> ChatHub:
    """Return the chat hub created on application startup.

    Raises:
        HTTPException: If the application has not finished starting.
    """
    hub: ChatHub | None = getattr(request.app.state, "hub", None)
    if hub is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat service is not running",
        )
    return hub


def get_admin_auth_dep() -> AdminAuthService:
    """Return the shared admin auth service."""
    return get_admin_auth_service()


HubDep = Annotated[ChatHub, Depends(get_hub)]
AdminAuthDep = Annotated[AdminAuthService, Depends(get_admin_auth_dep)]


def require_admin(
    auth: AdminAuthDep,
    x_admin_token: Annotated[str | None, Header()] = None,
    admin_session: Annotated[str | None, Cookie(alias="adminSession")] = None,
) -> str:
    """Return the caller's admin token or reject the request.

    The token is read from the ``X-Admin-Token`` header first and then from
    the ``adminSession`` cookie set at login.
    """
    token = x_admin_token or admin_session
    if not auth.verify_session(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return token  # type: ignore[return-value]


AdminTokenDep = Annotated[str, Depends(require_admin)]
