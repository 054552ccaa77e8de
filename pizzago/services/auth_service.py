# pizzago/services/auth_service.py
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pizzago.data.models.account import AccountModel
from pizzago.data.models.email_verification import EmailVerificationModel
from pizzago.domain.errors import (
    AlreadyVerified,
    Conflict,
    InvalidCredentials,
    NotFound,
    RateLimited,
    ValidationError,
)
from pizzago.repos.account_repo import AccountRepo
from pizzago.services import security
from pizzago.services.notification_service import EmailSender
from pizzago.services.session_manager import SessionManager, generate_session_id
from pizzago.services.session_store import SessionStore
from pizzago.utils.logging import get_logger
from pizzago.utils.settings import (
    BASE_DOMAIN,
    EMAIL_RATE_LIMIT_PREFIX,
    EMAIL_RATE_LIMIT_SECONDS,
    VERIFICATION_TTL_HOURS,
)

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    return email.strip().lower()


def verification_link(token: str) -> str:
    return f"{BASE_DOMAIN.rstrip('/')}/api/v1/auth/verify?token={token}"


class AuthService:
    """
    Registration, email verification, login and logout.

    Account states: unverified -> verified (terminal). Verification tokens
    are single use: the row is deleted in the same commit that flips the
    account. Resending is limited per email by a marker key with a TTL in
    the session store.
    """

    def __init__(
        self,
        db: Session,
        sessions: SessionManager,
        store: SessionStore,
        email_sender: EmailSender,
    ):
        self.repo = AccountRepo(db)
        self.db = db
        self.sessions = sessions
        self.store = store
        self.email_sender = email_sender

    def register(self, email: str | None, password: str | None) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not _EMAIL_RE.match(email.strip()):
            raise ValidationError("Invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 8 characters long")

        email = normalize_email(email)
        if self.repo.get_by_email(email):
            raise Conflict("User already exists")

        verification = self._new_verification(email)
        try:
            account = self.repo.create_account(
                AccountModel(email=email, password_hash=security.hash_password(password), verified=False),
                verification,
            )
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            self.db.rollback()
            raise Conflict("User already exists")

        logger.info(f"Account {account.id} registered, verification pending")

        # no rate limit here: a second register for the same email already stops at the conflict
        self.email_sender.send(
            email,
            "Verify your account",
            f"Welcome to PizzaGo! Click the link to verify your account: {verification_link(verification.token)}",
        )
        return {"message": "User created successfully. Please check your email to verify your account."}

    def resend_verification(self, email: str | None) -> Dict[str, Any]:
        if not email:
            raise ValidationError("Email is required")

        email = normalize_email(email)
        account = self.repo.get_by_email(email)
        if account is None or account.verified:
            raise NotFound("User not found or already verified")

        marker = f"{EMAIL_RATE_LIMIT_PREFIX}{email}"
        if not self.store.set_if_absent(marker, "1", EMAIL_RATE_LIMIT_SECONDS):
            logger.info(f"Verification resend for account {account.id} rate limited")
            raise RateLimited("Please wait before requesting another verification email.")

        verification = self._new_verification(email)
        self.repo.replace_verifications(account, verification)
        logger.info(f"Verification token reissued for account {account.id}")

        self.email_sender.send(
            email,
            "Verify your account",
            f"Click the link to verify your account: {verification_link(verification.token)}",
        )
        return {"message": "Verification email sent."}

    def verify(self, token: str | None) -> Dict[str, Any]:
        if not token:
            raise ValidationError("Token is required")

        verification = self.repo.get_live_verification(token, datetime.now(timezone.utc))
        account = self.repo.get_account(verification.user_id) if verification else None
        if verification is None or account is None:
            raise NotFound("Invalid or expired token")

        if account.verified:
            raise AlreadyVerified()

        self.repo.mark_verified(account, verification)
        logger.info(f"Account {account.id} verified")
        return {"message": "Email verified successfully."}

    def login(self, email: str | None, password: str | None) -> tuple[Dict[str, Any], str]:
        """
        Returns the response body and a new bearer session token bound to the
        account. The caller's cookie session is left as it is.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        account = self.repo.get_by_email(normalize_email(email))
        if account is None or not account.verified:
            raise NotFound("User not found or not verified")

        if not security.verify_password(password, account.password_hash):
            logger.info(f"Failed login for account {account.id}")
            raise InvalidCredentials()

        token = generate_session_id()
        self.sessions.bind_user(token, account.id)
        logger.info(f"Account {account.id} logged in")

        return {"user": {"id": account.id, "email": account.email}}, token

    def logout(self, session_id: str | None) -> Dict[str, Any]:
        if not session_id:
            raise ValidationError("No session found")

        self.sessions.destroy(session_id)
        return {"message": "Logged out successfully."}

    @staticmethod
    def _new_verification(email: str) -> EmailVerificationModel:
        now = datetime.now(timezone.utc)
        return EmailVerificationModel(
            email=email,
            token=security.secure_token(),
            expires_at=now + timedelta(hours=VERIFICATION_TTL_HOURS),
            created_at=now,
        )
