from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from fraudlr.core.config import Settings
from fraudlr.db.session import get_db
from fraudlr.dependencies.auth import clear_session_cookie, get_current_account, get_settings
from fraudlr.models.account import Account
from fraudlr.schemas.auth import PasswordChange, UserUpdate
from fraudlr.services import accounts

router = APIRouter()


@router.put("/me")
def update_user_profile(
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
):
    """Update display name and/or email"""
    account = accounts.update_profile(db, account, name=user_data.name, email=user_data.email)
    return {"user": accounts.public_user(account)}


@router.put("/me/password")
def change_password(
    password_data: PasswordChange,
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
):
    accounts.change_password(db, account, password_data.current_password, password_data.new_password)
    return {"message": "Password updated successfully"}


@router.delete("/me")
def delete_user(
    response: Response,
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
    settings: Settings = Depends(get_settings),
):
    """Delete the account with all of its cases, integrations and subscription, then log out."""
    accounts.delete_account(db, account, settings.UPLOADS_DIR)
    clear_session_cookie(response, settings)
    return {"message": "Account deleted successfully"}
