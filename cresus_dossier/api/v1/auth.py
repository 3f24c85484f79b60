"""POST /v1/auth/login - Advisor sign-in"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from cresus_dossier.api.v1.schemas import LoginRequest, TokenResponse
from cresus_dossier.api.dependencies import get_auth_service, get_request_id
from cresus_dossier.domain.exceptions import AuthenticationError
from cresus_dossier.infrastructure.security import AdvisorAuthService

router = APIRouter()


@router.post("/auth/login", response_model=TokenResponse)
def login(
    request_body: LoginRequest,
    request: Request,
    auth_service: AdvisorAuthService = Depends(get_auth_service),
):
    """Exchange advisor credentials for a bearer token"""
    request_id = get_request_id(request)

    try:
        email = auth_service.authenticate(request_body.email, request_body.password)
    except AuthenticationError as e:
        logging.warning(f"Advisor login refused: {e}", extra={"request_id": request_id})
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logging.info("Advisor signed in", extra={"request_id": request_id, "advisor": email})
    return TokenResponse(
        access_token=auth_service.create_token(email),
        expires_in=auth_service.jwt_expiration_hours * 3600,
    )
