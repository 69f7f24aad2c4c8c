# classbook/routes/auth.py
"""
Login, signup and logout.

``GET /auth`` and ``GET /signup`` describe the forms the frontend renders;
the route guard sends already signed-in users away from both.
"""

import logging
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from classbook.api.dependencies import get_auth_service, get_settings
from classbook.auth import create_access_token, decode_access_token
from classbook.core.config import Settings
from classbook.core.exceptions import UnauthorizedException
from classbook.models.user import User
from classbook.schemas.auth import (
    AuthPageResponse,
    LoginRequest,
    LoginResponse,
    SignupRequest,
    UserResponse,
    safe_redirect,
)
from classbook.services.auth_service import AuthService
from classbook.utils.cookies import clear_session_cookie, set_session_cookie

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _issue_session(response: Response, user: User, settings: Settings) -> None:
    token = create_access_token({"sub": user.id, "email": user.email}, settings)
    set_session_cookie(response, settings, token)


@router.get("/auth", response_model=AuthPageResponse)
def login_page(redirect_to: Optional[str] = Query(None)) -> AuthPageResponse:
    return AuthPageResponse(
        page="login", redirect_to=safe_redirect(redirect_to), submit_to="/auth/login"
    )


@router.get("/signup", response_model=AuthPageResponse)
def signup_page() -> AuthPageResponse:
    return AuthPageResponse(page="signup", submit_to="/auth/signup")


@router.post("/auth/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = service.authenticate_user(payload.email, payload.password)
    if user is None:
        raise UnauthorizedException("Incorrect email or password", code="INVALID_CREDENTIALS")

    body = LoginResponse(
        redirect_to=payload.redirect_to or "/", user=UserResponse.model_validate(user)
    )
    response = JSONResponse(body.model_dump())
    _issue_session(response, user, settings)
    logger.info(f"User {user.id} signed in")
    return response


@router.post("/auth/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = service.register_user(payload)
    response = JSONResponse(
        UserResponse.model_validate(user).model_dump(), status_code=status.HTTP_201_CREATED
    )
    _issue_session(response, user, settings)
    return response


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(settings: Settings = Depends(get_settings)) -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response, settings)
    return response


@router.get("/auth/callback")
def auth_callback(
    token: str = Query(..., min_length=1),
    redirect_to: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Accept a session token issued elsewhere, store it as the cookie and move on."""
    try:
        decode_access_token(token, settings)
    except jwt.PyJWTError as exc:
        logger.info(f"Rejected auth callback token: {exc}")
        return RedirectResponse("/auth", status_code=status.HTTP_303_SEE_OTHER)

    response = RedirectResponse(safe_redirect(redirect_to), status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, settings, token)
    return response
