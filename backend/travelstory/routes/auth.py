"""
TravelStory Backend - Identity Route Handlers
===============================================

What:  POST /create-account, POST /login, GET /get-user.
How:   Thin handlers: read the body, call AuthService, shape the envelope.
       Errors are raised as application exceptions and formatted by the
       global handlers in main.py.
"""

import logging

from fastapi import APIRouter

from travelstory.dependencies import AuthServiceDep, OwnerId
from travelstory.schemas.common import ErrorResponse
from travelstory.schemas.user import (
    AuthResponse,
    CreateAccountRequest,
    CurrentUserResponse,
    LoginRequest,
    PublicUser,
    UserProfile,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/create-account",
    status_code=201,
    response_model=AuthResponse,
    responses={
        400: {"description": "Missing field or email already registered", "model": ErrorResponse},
    },
    summary="Register a new account",
)
async def create_account(body: CreateAccountRequest, auth: AuthServiceDep) -> AuthResponse:
    user, token = await auth.create_account(
        full_name=body.full_name,
        email=body.email,
        password=body.password,
    )
    return AuthResponse(
        user=PublicUser.model_validate(user),
        access_token=token,
        message="Registration Successful",
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Missing field or wrong password", "model": ErrorResponse},
        404: {"description": "No account for this email", "model": ErrorResponse},
    },
    summary="Log in and receive an access token",
)
async def login(body: LoginRequest, auth: AuthServiceDep) -> AuthResponse:
    user, token = await auth.login(email=body.email, password=body.password)
    return AuthResponse(
        user=PublicUser.model_validate(user),
        access_token=token,
        message="Login Successful",
    )


@router.get(
    "/get-user",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Get the authenticated user",
)
async def get_user(owner_id: OwnerId, auth: AuthServiceDep) -> CurrentUserResponse:
    user = await auth.current_user(owner_id)
    return CurrentUserResponse(user=UserProfile.model_validate(user))
