"""
Case routes. A case is opened by uploading a CSV; the analysis itself runs elsewhere.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from fraudlr.core.config import Settings
from fraudlr.db.session import get_db
from fraudlr.dependencies.auth import get_current_account, get_current_account_id, get_settings
from fraudlr.models.account import Account
from fraudlr.services import cases as case_service

router = APIRouter()


@router.post("/cases", status_code=status.HTTP_201_CREATED)
def create_case(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a CSV and open a PENDING case for it.
    Counts against the plan's monthly upload quota (403 when exhausted).
    """
    content = file.file.read() if file is not None else b""
    case = case_service.create_case(
        db,
        account,
        name=name,
        description=description,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        content=content,
        uploads_dir=settings.UPLOADS_DIR,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )
    return {"case": case_service.serialize_case(case)}


@router.get("/cases")
def list_cases(
    db: Session = Depends(get_db),
    account_id: str = Depends(get_current_account_id),
):
    return {"cases": [case_service.serialize_case(c) for c in case_service.list_cases(db, account_id)]}


@router.get("/cases/{case_id}")
def get_case(
    case_id: str,
    db: Session = Depends(get_db),
    account_id: str = Depends(get_current_account_id),
):
    return {"case": case_service.serialize_case(case_service.get_case(db, account_id, case_id))}


@router.delete("/cases/{case_id}")
def delete_case(
    case_id: str,
    db: Session = Depends(get_db),
    account_id: str = Depends(get_current_account_id),
    settings: Settings = Depends(get_settings),
):
    case_service.delete_case(db, account_id, case_id, settings.UPLOADS_DIR)
    return {"message": "Case deleted successfully"}
