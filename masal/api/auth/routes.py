"""Development token endpoint."""

from typing import Optional

from fastapi import APIRouter, HTTPException, status

from ..config import is_production
from ..models.requests import TestTokenRequest
from ..models.responses import TestTokenResponse
from .tokens import create_access_token

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post("/test-token", response_model=TestTokenResponse)
async def issue_test_token(request: Optional[TestTokenRequest] = None) -> TestTokenResponse:
    """Issue a 24 hour token for local testing.

    Hidden (404) when APP_ENV is production.
    """
    if is_production():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    request = request or TestTokenRequest()
    token = create_access_token(user_id=request.user_id, email=request.email)
    return TestTokenResponse(token=token, user_id=request.user_id, email=request.email)
