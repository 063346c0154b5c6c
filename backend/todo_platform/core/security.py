import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import PasswordValueError
from todo_platform.core.config import settings
from todo_platform.core.errors import InvalidTokenError, MissingTokenError

logger = logging.getLogger(__name__)

# bcrypt is slow by design and embeds its own salt in the hash
# rounds comes from settings so tests can run at the minimum cost
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


@dataclass(frozen=True)
class TokenClaims:
    """Identity extracted from a verified token. Read-only, one per request."""
    owner_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except PasswordValueError:
        # bcrypt cannot hash some inputs (e.g. NUL bytes); such a password
        # can never have been stored, so it is simply a wrong password
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def create_access_token(
    owner_id: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
    now: Optional[datetime] = None,
    secret_key: Optional[str] = None,
) -> str:
    """Create a signed JWT carrying the owner id (sub), email, iat and exp"""
    issued_at = now or datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": owner_id,
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
    }
    return jwt.encode(to_encode, secret_key or settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(
    raw_token: Optional[str],
    secret_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TokenClaims:
    """
    Validate a bearer token and extract the caller's identity.

    Pure function of (token, secret, now): no store lookup and no caching,
    so the todo service never calls the identity service. Expiry is checked
    against `now` here rather than by jose so callers can pin the clock.

    Raises MissingTokenError when no token is given and InvalidTokenError
    for a bad signature, malformed payload or expired token.
    """
    if not raw_token:
        raise MissingTokenError()

    now = now or datetime.now(timezone.utc)
    # Signature is verified here; only HS256 (settings.ALGORITHM) is accepted,
    # so a token with alg "none" or an asymmetric alg never decodes
    try:
        payload = jwt.decode(
            raw_token,
            secret_key or settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise InvalidTokenError()

    # A correctly signed token still needs both identity claims to be trusted
    owner_id = payload.get("sub")
    email = payload.get("email")
    exp = payload.get("exp")
    iat = payload.get("iat", exp)
    if not isinstance(owner_id, str) or not owner_id or not isinstance(email, str):
        logger.debug("Token rejected: missing identity claims")
        raise InvalidTokenError()
    # bool is an int subclass; reject it explicitly
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
        logger.debug("Token rejected: missing or malformed exp")
        raise InvalidTokenError()

    # Expired exactly at exp; no leeway, so a token is never honoured past its lifetime
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    if now >= expires_at:
        logger.debug("Token rejected: expired")
        raise InvalidTokenError()

    return TokenClaims(
        owner_id=owner_id,
        email=email,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=expires_at,
    )
