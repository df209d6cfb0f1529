"""
api/routes/auth.py -- Public registration and login endpoints.

Routes:
  POST /api/register  -- create an account; 201 {message, userId}
  POST /api/login     -- password login; 200 {message, token, user}

Both handlers are plain `def` so FastAPI runs them in its threadpool: bcrypt
and the database calls block, and must not stall the event loop.

Security:
  Credential checks live in AuthService.login(). Do NOT inline
  get_by_email() + verify_password() here.
  Cache-Control: no-store on login responses (set by the error handler
  for failures).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserOut
from auth.service import AuthService

# Auth policy:
# - POST /api/register: public -- account creation needs no prior auth
# - POST /api/login:    public -- login endpoint must be unauthenticated
router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create a user account. The password is never echoed back."""
    service: AuthService = request.app.state.auth_service
    user_id = service.register(body.name, body.email, body.password)
    return RegisterResponse(message="User registered successfully", user_id=user_id)


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token.

    Unknown email and wrong password produce the same 401 body.
    """
    service: AuthService = request.app.state.auth_service
    result = service.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            message="Login successful",
            token=result.token,
            user=UserOut.from_profile(result.user),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
