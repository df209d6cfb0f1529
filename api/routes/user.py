"""
api/routes/user.py -- Token-gated endpoints for the signed-in user.

Routes:
  GET  /api/user/dashboard  -- profile + up to 20 recent activities, newest first
  POST /api/user/activity   -- append an action to the caller's activity log

Gating (auth.dependencies.get_current_claims):
  no token          -> 401
  rejected token    -> 403
The verified claims identify the caller; user_id is never taken from the body.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ActivityCreate, ActivityOut, DashboardResponse, MessageResponse, UserOut
from auth.dependencies import get_current_claims
from auth.models import TokenClaims
from auth.service import AuthService

# Auth policy:
# - GET  /api/user/dashboard: requires bearer token
# - POST /api/user/activity:  requires bearer token
router = APIRouter(prefix="/user")


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(request: Request, claims: TokenClaims = Depends(get_current_claims)) -> DashboardResponse:
    """Return the caller's profile and recent activity. Read-only."""
    service: AuthService = request.app.state.auth_service
    dashboard = service.dashboard(claims)
    return DashboardResponse(
        user=UserOut.from_profile(dashboard.user),
        activities=[ActivityOut.from_activity(a) for a in dashboard.activities],
    )


@router.post("/activity", response_model=MessageResponse, status_code=201)
def log_activity(
    request: Request,
    body: ActivityCreate,
    claims: TokenClaims = Depends(get_current_claims),
) -> MessageResponse:
    service: AuthService = request.app.state.auth_service
    service.log_activity(claims, body.action)
    return MessageResponse(message="Activity logged")
