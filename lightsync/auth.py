"""Password hashing and JWT authentication"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Header, HTTPException

from lightsync import config
from lightsync.logger import logger


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as carried in the token."""
    email: str
    first_name: str = ""


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _secret() -> str:
    if not config.JWT_SECRET:
        raise RuntimeError("JWT_SECRET environment variable must be set")
    return config.JWT_SECRET


def create_access_token(email: str, first_name: str = "") -> str:
    now = datetime.now(timezone.utc)

    payload = {
        "email": email,
        "firstName": first_name,
        "iat": now,
        "exp": now + timedelta(hours=config.JWT_EXPIRE_HOURS),
    }

    token = jwt.encode(payload, _secret(), algorithm=config.JWT_ALGORITHM)
    logger.info(f"Created access token for {email}")

    return token


def verify_token(token: str) -> Optional[Identity]:
    try:
        payload = jwt.decode(token, _secret(), algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        return None

    email = payload.get("email")
    if not email:
        logger.warning("Token missing email")
        return None

    return Identity(email=email, first_name=payload.get("firstName") or "")


def get_current_identity(authorization: Optional[str] = Header(None)) -> Identity:
    """
    FastAPI dependency: caller identity from "Authorization: Bearer <token>".

    Raises:
        HTTPException: 401 if no token was sent, 403 if it does not verify
    """
    token = None
    if authorization:
        parts = authorization.split(" ")
        if len(parts) > 1 and parts[1]:
            token = parts[1]

    if not token:
        raise HTTPException(status_code=401, detail="Missing token")

    identity = verify_token(token)
    if identity is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    return identity
