"""
Credential and session-token helpers.

Passwords are hashed with bcrypt (salted, cost factor 12 by default).
Sessions are HS256-signed JWTs carrying the account id and email; they are
verified statelessly on every request.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext


DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_TOKEN_LIFETIME = timedelta(days=7)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=DEFAULT_BCRYPT_ROUNDS)


def configure_password_hashing(rounds: int) -> None:
    """Set the bcrypt cost factor used by hash_password."""
    pwd_context.update(bcrypt__rounds=rounds)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # passlib raises on unrecognised or truncated hashes; treat them as a mismatch
    if not isinstance(plain_password, str) or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class SessionIdentity:
    account_id: str
    email: str
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class SessionTokens:
    """Issues and verifies signed session tokens with a process-wide secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", lifetime: timedelta = DEFAULT_TOKEN_LIFETIME):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, account_id: str, email: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": account_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[SessionIdentity]:
        """
        Return the identity carried by a valid token, or None.
        Bad signatures, malformed tokens and expired tokens are not distinguished.
        """
        if not token or not isinstance(token, str):
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError:
            return None

        account_id = payload.get("sub")
        email = payload.get("email")
        if not isinstance(account_id, str) or not isinstance(email, str):
            return None

        return SessionIdentity(
            account_id=account_id,
            email=email,
            issued_at=_from_timestamp(payload.get("iat")),
            expires_at=_from_timestamp(payload.get("exp")),
        )


def _from_timestamp(value) -> Optional[datetime]:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None
