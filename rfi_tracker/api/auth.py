import logging
from typing import Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

from rfi_tracker.backend.base import BackendClient, BackendError, DecodeError, decode_row
from rfi_tracker.schemas.auth import AuthResult, ErrorDescriptor
from rfi_tracker.schemas.user import UserProfile, UserRead

logger = logging.getLogger(__name__)

email_adapter = TypeAdapter(EmailStr)
DEFAULT_PROFILE_NAME = "New User"


def _failure(kind: str, message: str) -> AuthResult:
    return AuthResult(error=ErrorDescriptor(kind=kind, message=message))


def _backend_failure(exc: BackendError) -> AuthResult:
    """A 4xx answer means the backend rejected the credentials; anything else is an outage."""
    if exc.status_code is not None and 400 <= exc.status_code < 500:
        return _failure("rejected", exc.message)
    return _failure("backend", exc.message)


def _check_credentials(email: str, password: str) -> Optional[AuthResult]:
    try:
        email_adapter.validate_python(email)
    except ValidationError:
        return _failure("validation", "Invalid email address")
    if not password:
        return _failure("validation", "Password is required")
    return None


def sign_up(client: BackendClient, email: str, password: str) -> AuthResult:
    """Create an account and its `users` profile row."""
    invalid = _check_credentials(email, password)
    if invalid:
        return invalid
    try:
        user = decode_row(UserRead, client.sign_up(email, password))
    except BackendError as exc:
        logger.error("Sign up failed for %s: %s", email, exc.message)
        return _backend_failure(exc)

    profile = UserProfile(id=user.id, email=user.email, name=DEFAULT_PROFILE_NAME)
    try:
        client.insert("users", [profile.model_dump()])
    except BackendError as exc:
        # The account exists at this point; the profile row is best effort.
        logger.error("Could not create profile for user %s: %s", user.id, exc.message)
    return AuthResult(user=user)


def sign_in(client: BackendClient, email: str, password: str) -> AuthResult:
    invalid = _check_credentials(email, password)
    if invalid:
        return invalid
    try:
        user = decode_row(UserRead, client.sign_in(email, password))
    except BackendError as exc:
        logger.warning("Sign in failed for %s: %s", email, exc.message)
        return _backend_failure(exc)
    return AuthResult(user=user)


def sign_out(client: BackendClient) -> AuthResult:
    try:
        client.sign_out()
    except BackendError as exc:
        logger.error("Sign out failed: %s", exc.message)
        return _failure("backend", exc.message)
    return AuthResult()


def get_current_user(client: BackendClient) -> Optional[UserRead]:
    """Return the signed-in user, or None when there is no session."""
    row = client.get_user()
    if row is None:
        return None
    try:
        return decode_row(UserRead, row)
    except DecodeError as exc:
        logger.error("Discarding session with unexpected user record: %s", exc.message)
        return None
