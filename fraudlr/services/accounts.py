"""
Account registration, login and profile operations.

Routes call these with an open session; every write commits once, so the
account and its subscription are created (or deleted) as one unit.
"""
import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fraudlr.core.exceptions import AuthenticationError, ConflictError, InternalError, ValidationError
from fraudlr.models.account import Account
from fraudlr.models.case import Case
from fraudlr.models.subscription import Subscription, SubscriptionTier
from fraudlr.services.cases import remove_case_files
from fraudlr.services.usage import check_and_reset_usage
from fraudlr.utils.auth import hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
EMAIL_TAKEN_MESSAGE = "An account with this email already exists"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str:
    """Normalize an email and check its shape. Returns the normalized value."""
    normalized = normalize_email(email)
    if not EMAIL_PATTERN.match(normalized):
        raise ValidationError("Invalid email format")
    return normalized


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    # bcrypt refuses NUL bytes
    if "\x00" in password:
        raise ValidationError("Password contains invalid characters")


def _clean_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    return name.strip() or None


def get_account_by_email(db: Session, email: str) -> Optional[Account]:
    return db.query(Account).filter(Account.email == normalize_email(email)).first()


def _commit(db: Session, action: str, conflict_message: Optional[str] = None) -> None:
    """
    Commit or roll back. Integrity errors become ConflictError only where the
    write can collide with another account (conflict_message given).
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if conflict_message:
            raise ConflictError(conflict_message)
        logger.exception("Integrity error during %s", action)
        raise InternalError(f"An error occurred during {action}")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error during %s", action)
        raise InternalError(f"An error occurred during {action}")


def register_account(db: Session, email: Optional[str], password: Optional[str], name: Optional[str] = None) -> Account:
    """
    Create an account together with its FREE subscription.
    Both rows are committed in a single transaction; on failure neither persists.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    normalized = validate_email(email)
    validate_password(password)

    if get_account_by_email(db, normalized):
        raise ConflictError(EMAIL_TAKEN_MESSAGE)

    account = Account(
        email=normalized,
        password_hash=hash_password(password),
        name=_clean_name(name),
    )
    account.subscription = Subscription(
        tier=SubscriptionTier.FREE,
        csv_uploads_this_month=0,
        is_active=True,
    )
    db.add(account)
    _commit(db, "registration", conflict_message=EMAIL_TAKEN_MESSAGE)
    db.refresh(account)

    logger.info("Registered account %s", account.id)
    return account


class _LazyHash:
    """Hash computed on first use so importing the module stays cheap."""

    def __init__(self, secret: str):
        self._secret = secret
        self._value = None

    @property
    def value(self) -> str:
        if self._value is None:
            self._value = hash_password(self._secret)
        return self._value


_DUMMY_HASH = _LazyHash("fraudlr-dummy-password")


def authenticate(db: Session, email: Optional[str], password: Optional[str]) -> Account:
    """
    Check credentials. Unknown emails and wrong passwords raise the same error
    so responses cannot be used to enumerate accounts.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    account = get_account_by_email(db, email)
    if account is None:
        # Equalize timing with the wrong-password path
        verify_password(password, _DUMMY_HASH.value)
        logger.info("Login failed: unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    if not verify_password(password, account.password_hash):
        logger.info("Login failed for account %s", account.id)
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    return account


def account_summary(db: Session, account: Account) -> dict:
    """Public view of an account with its subscription summary (GET /auth/me)."""
    subscription = account.subscription
    if subscription is not None and check_and_reset_usage(subscription):
        _commit(db, "usage reset")

    return {
        "id": account.id,
        "email": account.email,
        "name": account.name,
        "createdAt": account.created_at.isoformat() if account.created_at else None,
        "subscription": {
            "tier": subscription.tier.value,
            "csvUploadsThisMonth": subscription.csv_uploads_this_month,
            "isActive": subscription.is_active,
        } if subscription is not None else None,
    }


def public_user(account: Account) -> dict:
    return {"id": account.id, "email": account.email, "name": account.name}


def update_profile(db: Session, account: Account, name: Optional[str] = None, email: Optional[str] = None) -> Account:
    if name is not None:
        account.name = _clean_name(name)

    if email is not None:
        normalized = validate_email(email)
        if normalized != account.email:
            existing = get_account_by_email(db, normalized)
            if existing is not None and existing.id != account.id:
                raise ConflictError(EMAIL_TAKEN_MESSAGE)
            account.email = normalized

    _commit(db, "profile update", conflict_message=EMAIL_TAKEN_MESSAGE)
    db.refresh(account)
    return account


def change_password(db: Session, account: Account, current_password: Optional[str], new_password: Optional[str]) -> None:
    if not current_password or not new_password:
        raise ValidationError("Current and new password are required")
    if not verify_password(current_password, account.password_hash):
        raise AuthenticationError("Current password is incorrect")
    validate_password(new_password)
    if current_password == new_password:
        raise ValidationError("New password must be different from the current password")

    account.password_hash = hash_password(new_password)
    _commit(db, "password change")
    logger.info("Password changed for account %s", account.id)


def delete_account(db: Session, account: Account, uploads_dir: str) -> None:
    """
    Delete an account; its cases, integrations and subscription go with it.
    Uploaded case files are removed once the rows are gone.
    """
    account_id = account.id
    file_urls = [url for (url,) in db.query(Case.file_url).filter(Case.account_id == account_id)]
    db.delete(account)
    _commit(db, "account deletion")
    remove_case_files(file_urls, uploads_dir)
    logger.info("Deleted account %s", account_id)
