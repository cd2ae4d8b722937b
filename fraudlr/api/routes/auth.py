from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from fraudlr.core.config import Settings
from fraudlr.db.session import get_db
from fraudlr.dependencies.auth import (
    clear_session_cookie,
    get_current_account,
    get_session_tokens,
    get_settings,
    set_session_cookie,
)
from fraudlr.models.account import Account
from fraudlr.schemas.auth import LoginRequest, SignupRequest
from fraudlr.services import accounts
from fraudlr.utils.auth import SessionTokens

router = APIRouter()


def _start_session(response: Response, account: Account, tokens: SessionTokens, settings: Settings) -> None:
    token = tokens.issue(account.id, account.email)
    set_session_cookie(response, token, settings)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: SessionTokens = Depends(get_session_tokens),
    settings: Settings = Depends(get_settings),
):
    """
    Create an account with a FREE subscription and start a session.
    400 on invalid input, 409 if the email is already registered.
    """
    account = accounts.register_account(db, body.email, body.password, body.name)
    _start_session(response, account, tokens, settings)
    return {
        "message": "Account created successfully",
        "user": accounts.public_user(account),
    }


@router.post("/login")
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: SessionTokens = Depends(get_session_tokens),
    settings: Settings = Depends(get_settings),
):
    """Check credentials and start a session. Unknown email and wrong password look the same."""
    account = accounts.authenticate(db, body.email, body.password)
    _start_session(response, account, tokens, settings)
    return {
        "message": "Login successful",
        "user": accounts.public_user(account),
    }


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Logout endpoint. Always succeeds."""
    clear_session_cookie(response, settings)
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
):
    """Current user with subscription summary. 401 without a valid session, 404 if the account is gone."""
    return {"user": accounts.account_summary(db, account)}
