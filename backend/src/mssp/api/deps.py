"""FastAPI dependencies for database sessions, authentication and audit context."""
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mssp.auth.jwt import jwt_auth
from mssp.database import get_audit_db, get_db
from mssp.utils.audit import AuditLogger, AuditSink, RequestContext, audit_sink

logger = structlog.get_logger(__name__)

__all__ = [
    "get_db",
    "get_audit_db",
    "get_current_user",
    "get_current_user_id",
    "get_request_context",
    "get_audit_sink",
    "get_audit_logger",
]

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Get current authenticated user from JWT token.

    Returns:
        dict: Decoded JWT claims (sub, username, role)

    Raises:
        HTTPException: If token is invalid, expired, or missing
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials

    try:
        payload = jwt_auth.verify_access_token(token)
    except jwt.ExpiredSignatureError:
        logger.warning("token_expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.warning("invalid_token", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    structlog.contextvars.bind_contextvars(user_id=payload.get("sub"))
    return payload


async def get_current_user_id(current_user: dict = Depends(get_current_user)) -> int:
    return int(current_user["sub"])


async def get_request_context(
    request: Request,
    user_id: int = Depends(get_current_user_id),
) -> RequestContext:
    """Client info for audit rows written while serving this request."""
    return RequestContext.from_request(request, user_id=user_id)


async def get_audit_sink() -> AuditSink:
    """Audit sink dependency; overridden in tests."""
    return audit_sink


async def get_audit_logger(
    context: RequestContext = Depends(get_request_context),
    sink: AuditSink = Depends(get_audit_sink),
) -> AuditLogger:
    """Fresh audit logger (and batch id) per request."""
    return AuditLogger(context=context, sink=sink)
