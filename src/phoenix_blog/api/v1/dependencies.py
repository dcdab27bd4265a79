"""Shared API dependencies for authentication and common functionality."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from phoenix_blog.core.security import decode_access_token
from phoenix_blog.db.session import get_db
from phoenix_blog.models import User
from phoenix_blog.services.razorpay import RazorpayClient, get_razorpay_client

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )


def _resolve_user(token: str, db: Session) -> User:
    """Decode a bearer token and load the user it names.

    Raises:
        HTTPException: If the token is invalid or the user does not exist.
    """
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise _credentials_error() from err

    subject = payload.get("sub")
    if not isinstance(subject, str):
        raise _credentials_error()
    try:
        user_id = uuid.UUID(subject)
    except ValueError as err:
        raise _credentials_error() from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token."""
    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Return the caller if a bearer token was sent, otherwise None.

    Public read routes use this so anonymous readers degrade to "not paid,
    not author, no view recorded". A token that is present but invalid is
    still rejected.
    """
    if credentials is None:
        return None
    return _resolve_user(credentials.credentials, db)


def get_payment_gateway() -> RazorpayClient:
    """Return the shared Razorpay client."""
    return get_razorpay_client()


# Type aliases for user and gateway dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
PaymentGatewayDep = Annotated[RazorpayClient, Depends(get_payment_gateway)]
