"""Account service: registration, login, bearer tokens, profile and dashboard."""

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any, Dict, Optional, Tuple

from ..models.enums import Level
from ..models.metrics import DashboardSummary, PerformanceMetrics
from ..models.user import User
from ..utils.exceptions import AuthenticationError, DuplicateResourceError, ValidationError
from ..utils.logging import get_logger
from .progression import LockRegistry
from .storage_manager import StorageManager

DEFAULT_TOKEN_EXPIRY_HOURS = 720
DEFAULT_PASSWORD_ITERATIONS = 190_000
MIN_PASSWORD_LENGTH = 6

INVALID_CREDENTIALS = "Invalid email or password"


def b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("utf-8").rstrip("=")


def b64url_decode(value: str) -> bytes:
    padding = "=" * ((4 - (len(value) % 4)) % 4)
    return base64.urlsafe_b64decode(value + padding)


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _email_key(email: str) -> str:
    return f"email:{email}"


def hash_password(password: str, salt: str, iterations: int = DEFAULT_PASSWORD_ITERATIONS) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations).hex()


class AccountService:
    """Owns the account lifecycle outside of progression."""

    def __init__(
        self,
        storage_manager: StorageManager,
        secret_key: str,
        token_expiry_hours: int = DEFAULT_TOKEN_EXPIRY_HOURS,
        password_iterations: int = DEFAULT_PASSWORD_ITERATIONS,
        locks: Optional[LockRegistry] = None,
    ):
        """Initialize the account service.

        Args:
            storage_manager: Initialized storage manager
            secret_key: Key used to sign bearer tokens
            token_expiry_hours: Token lifetime
            password_iterations: PBKDF2 iteration count
            locks: Lock registry shared with the progression engine; user IDs and
                emails are used as keys
        """
        if not secret_key:
            raise ValueError("secret_key is required")
        self.storage_manager = storage_manager
        self.secret_key = secret_key
        self.token_expiry_hours = max(1, token_expiry_hours)
        self.password_iterations = password_iterations
        self.locks = locks if locks is not None else LockRegistry()
        self.logger = get_logger(__name__)

    # Tokens

    def _sign(self, payload_b64: str) -> bytes:
        return hmac.new(self.secret_key.encode("utf-8"), payload_b64.encode("utf-8"), hashlib.sha256).digest()

    def create_token(self, user: User) -> str:
        """Create a signed bearer token for a user."""
        payload = {
            "uid": user.id,
            "email": user.email,
            "exp": int(time.time()) + self.token_expiry_hours * 3600,
        }
        payload_b64 = b64url_encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
        return f"{payload_b64}.{b64url_encode(self._sign(payload_b64))}"

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Verify a token's signature and expiry.

        Raises:
            AuthenticationError: If the token is malformed, forged or expired
        """
        parts = (token or "").split(".")
        if len(parts) != 2:
            raise AuthenticationError("Invalid authentication token", auth_method="bearer")

        payload_b64, signature_b64 = parts
        try:
            provided = b64url_decode(signature_b64)
            payload = json.loads(b64url_decode(payload_b64).decode("utf-8"))
        except (ValueError, UnicodeDecodeError):
            raise AuthenticationError("Invalid authentication token", auth_method="bearer")

        if not hmac.compare_digest(self._sign(payload_b64), provided):
            raise AuthenticationError("Invalid authentication token", auth_method="bearer")
        if not isinstance(payload, dict) or int(payload.get("exp", 0)) < int(time.time()):
            raise AuthenticationError("Authentication token expired", auth_method="bearer")
        return payload

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user account.

        Raises:
            AuthenticationError: If the token is invalid or the account is gone
        """
        payload = self.decode_token(token)
        user = await self.storage_manager.accounts.get(str(payload.get("uid", "")))
        if user is None or user.email != payload.get("email"):
            raise AuthenticationError("Account not found. Please log in again.", auth_method="bearer")
        return user

    # Registration and login

    def _new_password(self, password: str) -> Tuple[str, str]:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field_name="password",
            )
        salt = secrets.token_hex(16)
        return hash_password(password, salt, self.password_iterations), salt

    async def register(self, name: str, email: str, password: str) -> Tuple[User, str]:
        """Create an account and its performance metrics record.

        Returns:
            The new user and a bearer token

        Raises:
            ValidationError: If a field is missing
            DuplicateResourceError: If the email is already registered
        """
        name = (name or "").strip()
        email = normalize_email(email)
        if not name:
            raise ValidationError("Name is required", field_name="name")
        if not email or "@" not in email:
            raise ValidationError("A valid email is required", field_name="email")
        password_hash, salt = self._new_password(password)

        async with self.locks.hold(_email_key(email)):
            if await self.storage_manager.accounts.find_by_email(email):
                raise DuplicateResourceError("User already exists", resource_type="User")

            user = User(name=name, email=email, password_hash=password_hash, password_salt=salt)
            await self.storage_manager.accounts.create(user)
            await self.storage_manager.metrics.create(PerformanceMetrics(id=user.id, user_id=user.id))

        self.logger.info("User registered", extra={"user_id": user.id})
        return user, self.create_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password wrong
        """
        user = await self.storage_manager.accounts.find_by_email(normalize_email(email))
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS, auth_method="password")

        expected = hash_password(password or "", user.password_salt, self.password_iterations)
        if not hmac.compare_digest(expected, user.password_hash):
            self.logger.warning("Failed login attempt", extra={"user_id": user.id})
            raise AuthenticationError(INVALID_CREDENTIALS, auth_method="password")

        self.logger.info("User logged in", extra={"user_id": user.id})
        return user, self.create_token(user)

    # Profile

    async def get_profile(self, user_id: str) -> User:
        return await self.storage_manager.accounts.require(user_id)

    async def _update_profile(
        self, user_id: str, name: Optional[str], email: Optional[str], password: Optional[str]
    ) -> User:
        user = await self.storage_manager.accounts.require(user_id)
        previous_email = user.email

        if name and name.strip():
            user.name = name.strip()
        if email and email.strip():
            new_email = normalize_email(email)
            if "@" not in new_email:
                raise ValidationError("A valid email is required", field_name="email")
            user.email = new_email
        if password:
            user.password_hash, user.password_salt = self._new_password(password)

        if user.email != previous_email:
            async with self.locks.hold(_email_key(user.email)):
                existing = await self.storage_manager.accounts.find_by_email(user.email)
                if existing and existing.id != user.id:
                    raise DuplicateResourceError("Email is already in use", resource_type="User")
                await self.storage_manager.accounts.update(user)
        else:
            await self.storage_manager.accounts.update(user)
        return user

    async def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Tuple[User, str]:
        """Update name, email or password; XP, level and badges are untouched.

        Returns:
            The updated user and a fresh token (the email is part of the token)
        """
        async with self.locks.hold(user_id):
            user = await self._update_profile(user_id, name, email, password)

        self.logger.info("Profile updated", extra={"user_id": user_id})
        return user, self.create_token(user)

    async def get_performance(self, user_id: str) -> PerformanceMetrics:
        """Get the user's performance metrics.

        Raises:
            NotFoundError: If no metrics record exists
        """
        return await self.storage_manager.metrics.for_user(user_id)

    async def get_dashboard(self, user_id: str) -> DashboardSummary:
        """Aggregate the numbers shown on the dashboard."""
        user = await self.storage_manager.accounts.require(user_id)
        metrics = await self.storage_manager.metrics.get(user_id)
        sessions = await self.storage_manager.sessions.list_by_user(user_id)
        resumes = await self.storage_manager.resumes.list_by_user(user_id)

        return DashboardSummary(
            interview_count=len(sessions),
            completed_interview_count=sum(1 for s in sessions if s.feedback_generated),
            resume_count=len(resumes),
            average_score=metrics.average_score if metrics else 0,
            progress_level=metrics.progress_level if metrics else Level.BEGINNER,
            account_level=user.level,
            xp_points=user.xp_points,
            badges=list(user.badges),
            latest_ats_score=user.ats_score if any(r.analyzed for r in resumes) else None,
            interviews_by_role=metrics.interviews_by_role.as_dict() if metrics else {},
        )
