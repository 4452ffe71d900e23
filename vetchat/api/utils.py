"""
JWT utilities for issuing and verifying access tokens.

Functions
---------
create_access_token(data: dict) -> str
    Creates a signed JWT access token with an expiration (`exp`) claim.
verify_token(token: str) -> str | None
    Verify a JWT's signature & expiration and return the subject (`sub`) if valid.
resolve_caller_id(token: str | None) -> UUID
    Turn a request token into the caller's user id, or raise UnauthorizedError.

Tokens are issued by the authentication service; `create_access_token` exists
here for local tooling and tests. The `sub` claim carries the user's UUID.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from vetchat.database.config.config import settings
from vetchat.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (``sub`` = user id as a string).

    Returns
    -------
    str
        Encoded JWT string.
    """
    encoding = data.copy()
    # exp is a NumericDate (seconds since epoch)
    expires = int(datetime.now().timestamp()) + (int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60)
    encoding.update({"exp": expires})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """
    Verify a JWT and return its subject.

    Returns
    -------
    str | None
        The `sub` claim if the token is valid, otherwise None (invalid
        signature, expired, malformed).
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload.get("sub")
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None


def resolve_caller_id(token: Optional[str]) -> UUID:
    """
    Resolve the caller's user id from a raw token.

    Raises
    ------
    UnauthorizedError
        No token, an invalid token, or a subject that is not a UUID.
    """
    if not token:
        raise UnauthorizedError("Missing Token")
    subject = verify_token(token)
    if not subject:
        raise UnauthorizedError("Invalid or expired token")
    try:
        return UUID(str(subject))
    except ValueError:
        raise UnauthorizedError("Token subject is not a user id")
