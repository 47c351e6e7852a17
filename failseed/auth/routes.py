import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from failseed.core.database import get_db
from failseed.core.errors import FailSeedError
from failseed.auth.models import User
from failseed.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from failseed.auth.service import get_current_user, handle_login, handle_signup

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    summary="Register a new user",
    responses={
        200: {"description": "User created successfully"},
        400: {"description": "Email already registered"},
        422: {"description": "Validation error"},
        500: {"description": "Signup failed"},
    },
)
def register_route(data: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        return handle_signup(data, db)
    except (HTTPException, FailSeedError):
        raise
    except Exception as e:
        logger.exception(f"Signup failed: {e}")
        raise HTTPException(status_code=500, detail="Signup failed")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login and receive an access token",
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
        500: {"description": "Server error"},
    },
)
def login_route(data: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        return handle_login(data, db)
    except (HTTPException, FailSeedError):
        raise
    except Exception as e:
        logger.exception(f"Login failed: {e}")
        raise HTTPException(status_code=500, detail="Login failed")


@router.get(
    "/current-user",
    response_model=UserOut,
    summary="Get the authenticated user",
    responses={
        200: {"description": "Current user returned"},
        401: {"description": "Unauthorized"},
    },
)
def current_user_route(user: User = Depends(get_current_user)) -> UserOut:
    return user
