"""
Security utilities: JWT access tokens, PII masking and audit logging.
"""

import logging
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Literal, Optional, Set
from enum import Enum

import jwt

from core.config import settings

logger = logging.getLogger("security.audit")

UserType = Literal["candidate", "vendor", "admin"]
USER_TYPES: Set[str] = {"candidate", "vendor", "admin"}


class TokenError(Exception):
    """Raised when an access token cannot be used."""
    pass


class TokenExpiredError(TokenError):
    """Raised when JWT token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Raised when JWT token is invalid."""
    pass


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity carried by an access token."""
    user_id: str
    email: str
    user_type: str
    plan: Optional[str] = None

    @property
    def is_candidate(self) -> bool:
        return self.user_type == "candidate"

    @property
    def is_vendor(self) -> bool:
        return self.user_type == "vendor"


def create_access_token(
    user_id: str,
    email: str,
    user_type: UserType,
    plan: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed access token for the given identity."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "user_type": user_type,
        "plan": plan,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> AuthenticatedUser:
    """
    Verify a token and return the identity it carries.

    Raises:
        TokenExpiredError: if the token is past its expiry
        TokenInvalidError: if the signature or claims are invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}") from e

    user_type = payload.get("user_type")
    if user_type not in USER_TYPES:
        raise TokenInvalidError("Invalid token: unknown user type")

    return AuthenticatedUser(
        user_id=str(payload["sub"]),
        email=payload.get("email") or "",
        user_type=user_type,
        plan=payload.get("plan"),
    )


class AuditAction(str, Enum):
    """Audit log action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOCK = "LOCK"
    APPLY = "APPLY"
    CLOSE = "CLOSE"
    REOPEN = "REOPEN"
    POKE = "POKE"


class ResourceType(str, Enum):
    """Resource types for audit logging."""
    CANDIDATE_PROFILE = "CANDIDATE_PROFILE"
    APPLICATION = "APPLICATION"
    JOB = "JOB"
    POKE = "POKE"


# PII fields that should be masked in logs
PII_FIELDS: Set[str] = {
    "email", "phone", "name", "full_name",
    "candidate_email", "vendor_email", "target_email", "sender_email",
    "recruiter_phone", "expected_hourly_rate",
}


def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask PII fields in data structures.

    Args:
        data: Data to mask (dict, list, or primitive)
        depth: Current recursion depth (max 10)

    Returns:
        Data with PII fields masked
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in PII_FIELDS:
                if isinstance(value, str) and len(value) > 0:
                    # Show first char and length
                    masked[key] = f"{value[0]}***[{len(value)}]"
                else:
                    masked[key] = "[MASKED]"
            else:
                masked[key] = mask_pii(value, depth + 1)
        return masked
    elif isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]
    else:
        return data


def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[Any] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    contains_pii: bool = False,
) -> Dict[str, Any]:
    """
    Log an audit event as a single structured JSON line.

    Returns the event so callers and tests can inspect it.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id is not None else None,
        "user_id": user_id,
        "contains_pii": contains_pii,
        "details": mask_pii(details) if details and contains_pii else details,
    }
    logger.info(json.dumps(event, default=str))
    return event
