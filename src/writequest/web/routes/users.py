"""Account and profile endpoints."""

from __future__ import annotations

import sqlite3

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from writequest.core.progress_service import get_or_create_progress
from writequest.db import users_repository
from writequest.db.users_repository import UserRecord
from writequest.utils.security import hash_password, verify_password
from writequest.web.deps import get_current_user
from writequest.web.schemas import (
    LoginRequest,
    MessageResponse,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)

logger = structlog.get_logger(__name__)

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
user_router = APIRouter(prefix="/api/user", tags=["user"])


def _user_response(user: UserRecord) -> UserResponse:
    return UserResponse.model_validate(user.to_dict())


@auth_router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest) -> UserResponse:
    """Create an account. Students start with default progress."""
    if users_repository.get_user_by_username(data.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username '{data.username}' is already taken",
        )

    try:
        user = users_repository.create_user(
            username=data.username,
            password=hash_password(data.password),
            display_name=data.display_name,
            role=data.role,
            email=data.email,
            age=data.age,
            grade=data.grade,
            avatar_url=data.avatar_url,
        )
    except sqlite3.IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username '{data.username}' is already taken",
        ) from e

    if user.role == "student":
        get_or_create_progress(user.id)

    logger.info("users.registered", user_id=user.id, role=user.role)
    return _user_response(user)


@auth_router.post("/login", response_model=UserResponse)
async def login(data: LoginRequest) -> UserResponse:
    """Check credentials and return the user."""
    user = users_repository.get_user_by_username(data.username)
    if user is None or not verify_password(data.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    return _user_response(user)


@auth_router.get("/me", response_model=UserResponse)
async def me(user: UserRecord = Depends(get_current_user)) -> UserResponse:
    """The current user, without the password hash."""
    return _user_response(user)


@user_router.patch("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    user: UserRecord = Depends(get_current_user),
) -> UserResponse:
    """Update display name, contact details, age, grade or avatar."""
    updated = users_repository.update_user_profile(
        user.id, **data.model_dump(exclude_unset=True)
    )
    return _user_response(updated)


@user_router.patch("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    user: UserRecord = Depends(get_current_user),
) -> MessageResponse:
    """Change password after checking the current one."""
    if not verify_password(data.current_password, user.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    users_repository.update_user_password(user.id, hash_password(data.new_password))
    logger.info("users.password_changed", user_id=user.id)
    return MessageResponse(message="Password updated")
