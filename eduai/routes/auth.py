from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import LoginRequest, LoginResponse
from ..services.auth_service import (
    AuthConfigurationError,
    AuthenticationError,
    AuthService,
    get_auth_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, service: AuthService = Depends(get_auth_service)) -> LoginResponse:
    """
    Exchange email and password for Cognito tokens.
    """
    if not req.email or not req.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    try:
        tokens = service.login(req.email, req.password)
    except AuthConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Server configuration error")
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)

    return LoginResponse(**tokens)
