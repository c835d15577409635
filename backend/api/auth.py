"""
Authentication API Routes

Bearer tokens for the peer API. A client exchanges the configured API
secret for a signed token; every peer route verifies it.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from config import settings

logger = logging.getLogger(__name__)
router = APIRouter()

_bearer = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    """Claims carried by an access token."""
    sub: str
    iss: str
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, timezone.utc)


class TokenRequest(BaseModel):
    """Request for an access token."""
    app_secret: str
    client_name: str = "client"


class TokenResponse(BaseModel):
    """Issued access token."""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(subject: str, now: Optional[datetime] = None) -> str:
    """Sign a token for ``subject`` valid for ``token_expire_minutes``."""
    now = now or datetime.now(timezone.utc)
    claims = TokenClaims(
        sub=subject,
        iss=settings.token_issuer,
        iat=int(now.timestamp()),
        exp=int((now + timedelta(minutes=settings.token_expire_minutes)).timestamp()),
    )
    return jwt.encode(
        claims.model_dump(),
        settings.secret_key,
        algorithm=settings.token_algorithm,
    )


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify signature, issuer and expiry of a token.

    Raises:
        HTTPException: 401 for any token that does not verify
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.token_algorithm],
            issuer=settings.token_issuer,
        )
        return TokenClaims(**payload)
    except (JWTError, ValidationError) as e:
        logger.warning("Rejected access token: %s", e)
        raise _unauthorized("Invalid or expired token")


async def require_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(_bearer)],
) -> TokenClaims:
    if credentials is None:
        raise _unauthorized("Missing bearer token")
    return decode_access_token(credentials.credentials)


TokenDep = Annotated[TokenClaims, Depends(require_token)]


@router.post("/token", response_model=TokenResponse)
async def issue_token(request: TokenRequest):
    """Exchange the configured API secret for an access token."""
    if not secrets.compare_digest(request.app_secret, settings.api_token):
        logger.warning("Rejected token request for %s", request.client_name)
        raise _unauthorized("Invalid application secret")
    
    token = create_access_token(request.client_name)
    return TokenResponse(
        access_token=token,
        expires_at=decode_access_token(token).expires_at,
    )


@router.get("/status")
async def auth_status(claims: TokenDep):
    return {
        "authenticated": True,
        "subject": claims.sub,
        "expires_at": claims.expires_at,
    }
