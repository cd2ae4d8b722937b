import logging
from typing import Optional

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from fraudlr.core.config import Settings
from fraudlr.core.exceptions import AuthenticationError, NotFoundError
from fraudlr.db.session import get_db
from fraudlr.models.account import Account
from fraudlr.utils.auth import SessionIdentity, SessionTokens

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_tokens(request: Request) -> SessionTokens:
    return request.app.state.session_tokens


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """
    Store the session token in an HTTP-only cookie.
    Secure-only in production; max-age matches the token lifetime.
    """
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(settings.token_lifetime.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def get_current_identity(request: Request) -> Optional[SessionIdentity]:
    """Resolve the session cookie to an identity. Missing or invalid cookies yield None."""
    settings = get_settings(request)
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return get_session_tokens(request).verify(token)


def get_current_account_id(identity: Optional[SessionIdentity] = Depends(get_current_identity)) -> str:
    if identity is None:
        raise AuthenticationError("Not authenticated")
    return identity.account_id


def get_current_account(
    account_id: str = Depends(get_current_account_id),
    db: Session = Depends(get_db),
) -> Account:
    """Re-fetch the account behind a valid session; a deleted account is a 404, not a 401."""
    account = db.get(Account, account_id)
    if account is None:
        logger.info("Session token refers to missing account %s", account_id)
        raise NotFoundError("User not found")
    return account
