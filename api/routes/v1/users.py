"""
api/routes/v1/users.py -- Account REST endpoints.

Routes (mounted under Settings.api_prefix, default /api/v1/users):
  POST /register  -- create an account; 201 with the public user
  POST /login     -- password login; 200 with user + tokens, sets two cookies
  GET  /logout    -- requires the accessToken cookie; clears both cookies
  GET  /me        -- current user (session guard)

Handlers only translate between HTTP and auth/service.py. Failures are raised
as core.errors types and rendered by the exception handlers in api/main.py.
Handlers are plain `def` so the blocking store calls run in FastAPI's
threadpool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginData, LoginRequest, RegisterRequest, UserData, UserOut, envelope
from auth.dependencies import get_current_user
from auth.models import User, UserSummary
from auth.service import login_user, logout_user, register_user
from auth.store import UserStore
from auth.tokens import ACCESS_COOKIE, clear_auth_cookies, set_auth_cookies

# Auth policy:
# - POST /register: public
# - POST /login:    public
# - GET  /logout:   accessToken cookie must be present (not verified)
# - GET  /me:       session guard (get_current_user)
router = APIRouter()


@router.post("/register", status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Register a new user. The password is hashed before it is stored."""
    user_store: UserStore = request.app.state.user_store
    summary = register_user(user_store, body.name, body.username, body.email, body.password)
    return JSONResponse(
        status_code=201,
        content=envelope(201, "User registered successfully", UserData(user=UserOut.from_summary(summary))),
    )


@router.post("/login")
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username or email plus password; set both token cookies."""
    user_store: UserStore = request.app.state.user_store
    result = login_user(user_store, body.username, body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=envelope(200, "User logged in successfully", LoginData.from_result(result)),
    )
    set_auth_cookies(resp, result.access_token, result.refresh_token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/logout")
def logout(request: Request) -> JSONResponse:
    """Clear the token cookies. Only the presence of the access cookie is required."""
    user_store: UserStore = request.app.state.user_store
    logout_user(user_store, request.cookies.get(ACCESS_COOKIE))
    resp = JSONResponse(status_code=200, content=envelope(200, "User logged out successfully"))
    clear_auth_cookies(resp)
    return resp


@router.get("/me")
def me(current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Return the public fields of the authenticated user."""
    summary = UserSummary.from_user(current_user)
    return JSONResponse(
        status_code=200,
        content=envelope(200, "Current user fetched successfully", UserData(user=UserOut.from_summary(summary))),
    )
