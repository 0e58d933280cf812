"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Header, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.database import get_database
from mediavote.models.auth import AuthUser, Permission
from mediavote.services.auth import AuthService, has_permission

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> AuthService:
    """Dependency for auth service."""
    return AuthService(db)


def _extract_session_token(
    x_session_token: str | None,
    authorization: str | None,
) -> str | None:
    if x_session_token:
        return x_session_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


async def get_current_user(
    x_session_token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthUser:
    """Resolve current authenticated user."""
    session_token = _extract_session_token(x_session_token, authorization)
    if not session_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    user = await auth_service.get_user_by_session(session_token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )
    return user


def require_permission(permission: Permission):
    """Dependency factory rejecting users without ``permission``."""

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_permission(user, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user

    return dependency


@router.get("/me", response_model=AuthUser)
async def get_me(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Get authenticated user profile."""
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    x_session_token: str | None = Header(default=None),
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    """Log out current user."""
    session_token = _extract_session_token(x_session_token, authorization)
    if not session_token:
        return
    await auth_service.logout(session_token)
