"""Authentication utilities for JWT token management."""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from opentelemetry import trace

from .database import get_db
from .errors import AuthenticationError
from .observability import get_app_metrics

logger = structlog.get_logger(__name__)


# JWT Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-here-change-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "30"))

# auto_error=False so a missing header is reported as 401 rather than 403
security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's ID
        email: The user's email

    Returns:
        Encoded JWT token
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("create_access_token") as span:
        span.set_attribute("user.id", user_id)

        expire = datetime.now(UTC) + timedelta(days=EXPIRATION_DAYS)
        to_encode = {
            "sub": user_id,
            "email": email,
            "exp": expire,
        }
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

        logger.debug("jwt_token_created", user_id=user_id)

        return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """
    Decode and verify a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("decode_access_token") as span:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning("jwt_token_decode_failed", error=str(e), error_type=type(e).__name__)
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            return None

        span.set_attribute("user.id", str(payload.get("sub")))
        return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """
    Dependency to get the current authenticated user.

    Validates the bearer token and loads the user document.

    Raises:
        AuthenticationError: no token, invalid token, or unknown user
    """
    tracer = trace.get_tracer(__name__)
    metrics = get_app_metrics()

    with tracer.start_as_current_span("get_current_user") as span:
        if credentials is None:
            metrics.auth_failures.add(1, {"reason": "missing_credentials"})
            raise AuthenticationError("Not authenticated")

        payload = decode_access_token(credentials.credentials)
        user_id = payload.get("sub") if payload else None
        if not user_id:
            metrics.auth_failures.add(1, {"reason": "invalid_token"})
            raise AuthenticationError("Invalid authentication credentials")

        span.set_attribute("user.id", user_id)

        try:
            user_obj_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            metrics.auth_failures.add(1, {"reason": "invalid_user_id"})
            raise AuthenticationError("Invalid authentication credentials") from None

        db = get_db()
        user = await db.users.find_one({"_id": user_obj_id})

        if user is None:
            metrics.auth_failures.add(1, {"reason": "user_not_found"})
            raise AuthenticationError("User not found", {"user_id": user_id})

        logger.debug("auth_user_authenticated", user_id=user_id)

        return user
