"""Registration and login endpoints.

Identity is deliberately minimal: an email address is enough to obtain a
token. Every other endpoint only relies on the token's subject.
"""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from pymongo.errors import DuplicateKeyError

from ..auth import create_access_token
from ..database import get_db
from ..errors import AuthenticationError, ValidationError
from ..models import AuthResponse, LoginRequest, UserCreate, UserResponse
from ..observability import get_app_metrics, get_tracer

logger = structlog.get_logger(__name__)

tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(user: dict) -> AuthResponse:
    user_id = str(user["_id"])
    return AuthResponse(
        access_token=create_access_token(user_id=user_id, email=user["email"]),
        token_type="bearer",
        user=UserResponse(
            id=user_id,
            email=user["email"],
            name=user["name"],
            created_at=user["created_at"],
        ),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register_user(user: UserCreate):
    """Register a new user and return a JWT. Email must be unique."""
    with tracer.start_as_current_span("register_user") as span:
        span.set_attribute("user.email", user.email)

        logger.info("user_registration_attempt", email=user.email)

        db = get_db()

        if await db.users.find_one({"email": user.email}):
            metrics.auth_failures.add(1, {"reason": "duplicate_email"})
            raise ValidationError("Email already registered", {"email": user.email})

        user_doc = {
            "email": user.email,
            "name": user.name,
            "created_at": datetime.now(UTC),
        }

        try:
            result = await db.users.insert_one(user_doc)
        except DuplicateKeyError:
            metrics.auth_failures.add(1, {"reason": "duplicate_email"})
            raise ValidationError("Email already registered", {"email": user.email}) from None

        user_doc["_id"] = result.inserted_id
        span.set_attribute("user.id", str(result.inserted_id))

        logger.info("user_registered_successfully", user_id=str(result.inserted_id))
        metrics.user_registrations.add(1)

        return _auth_response(user_doc)


@router.post("/login", response_model=AuthResponse)
async def login_user(login: LoginRequest):
    """Log in with an email address and return a JWT."""
    with tracer.start_as_current_span("login_user") as span:
        span.set_attribute("user.email", login.email)

        db = get_db()

        user = await db.users.find_one({"email": login.email})
        if not user:
            metrics.auth_failures.add(1, {"reason": "user_not_found"})
            raise AuthenticationError("Invalid credentials", {"email": login.email})

        span.set_attribute("user.id", str(user["_id"]))

        logger.info("user_logged_in_successfully", user_id=str(user["_id"]))
        metrics.user_logins.add(1)

        return _auth_response(user)
