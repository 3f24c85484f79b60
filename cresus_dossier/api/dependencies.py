"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cresus_dossier.domain.exceptions import AuthenticationError
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.security import AdvisorAuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_storage_client() -> StorageClient:
    """Provide object storage client instance"""
    return StorageClient()


def get_auth_service() -> AdvisorAuthService:
    return AdvisorAuthService()


def get_current_advisor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AdvisorAuthService = Depends(get_auth_service),
) -> str:
    """Return the email of the advisor holding a valid bearer token"""
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = auth_service.verify_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})
    return payload["sub"]
