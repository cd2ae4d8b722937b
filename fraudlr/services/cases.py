"""
Case creation and lookup.

A case is created PENDING when a CSV is uploaded. Status changes after that
belong to the external analysis process, which drives them through
advance_case_status().
"""
import logging
import uuid
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fraudlr.core.exceptions import InternalError, NotFoundError, ValidationError
from fraudlr.models.account import Account
from fraudlr.models.case import Case, CaseStatus
from fraudlr.services.usage import check_upload_limit, record_upload

logger = logging.getLogger(__name__)

ALLOWED_CSV_CONTENT_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}

ALLOWED_TRANSITIONS = {
    CaseStatus.PENDING: {CaseStatus.PROCESSING, CaseStatus.FAILED},
    CaseStatus.PROCESSING: {CaseStatus.COMPLETED, CaseStatus.FAILED},
    CaseStatus.COMPLETED: set(),
    CaseStatus.FAILED: set(),
}


def get_uploads_dir(base: str) -> Path:
    """Return the case uploads directory, creating it if needed."""
    d = Path(base) / "cases"
    d.mkdir(parents=True, exist_ok=True)
    return d


def stored_file_path(file_url: Optional[str], uploads_dir: str) -> Optional[Path]:
    """Map a case file_url back to its location under the uploads directory."""
    if not file_url:
        return None
    return Path(uploads_dir) / "cases" / Path(file_url).name


def remove_case_files(file_urls: List[Optional[str]], uploads_dir: str) -> None:
    """Delete stored uploads. Runs after the owning rows are committed away."""
    for file_url in file_urls:
        path = stored_file_path(file_url, uploads_dir)
        if path is None:
            continue
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove upload %s", path, exc_info=True)


def is_csv_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    if filename and filename.lower().endswith(".csv"):
        return True
    return (content_type or "").split(";")[0].strip().lower() in ALLOWED_CSV_CONTENT_TYPES


def serialize_case(case: Case) -> dict:
    return {
        "id": case.id,
        "name": case.name,
        "description": case.description,
        "status": case.status.value,
        "fileUrl": case.file_url,
        "results": case.results,
        "createdAt": case.created_at.isoformat() if case.created_at else None,
        "updatedAt": case.updated_at.isoformat() if case.updated_at else None,
    }


def create_case(
    db: Session,
    account: Account,
    name: Optional[str],
    description: Optional[str],
    filename: Optional[str],
    content_type: Optional[str],
    content: bytes,
    uploads_dir: str,
    max_bytes: int,
) -> Case:
    """
    Store an uploaded CSV and open a PENDING case for it.
    The case row and the usage increment are committed together.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please provide a case name")
    if not content:
        raise ValidationError("Please upload a file")
    if not is_csv_upload(filename, content_type):
        raise ValidationError("Please upload a CSV file")
    if len(content) > max_bytes:
        raise ValidationError(f"File exceeds maximum size of {max_bytes // (1024 * 1024)}MB")

    subscription = account.subscription
    if subscription is None:
        raise NotFoundError("Subscription not found")
    check_upload_limit(subscription)

    safe_name = f"{uuid.uuid4().hex[:12]}.csv"
    target_path = get_uploads_dir(uploads_dir) / safe_name
    try:
        target_path.write_bytes(content)
    except OSError:
        logger.exception("Failed to save upload for account %s", account.id)
        raise InternalError("Failed to save file")

    case = Case(
        account_id=account.id,
        name=name,
        description=(description or "").strip() or None,
        status=CaseStatus.PENDING,
        file_url=f"/uploads/cases/{safe_name}",
    )
    db.add(case)
    try:
        record_upload(db, subscription)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        target_path.unlink(missing_ok=True)
        logger.exception("Failed to create case for account %s", account.id)
        raise InternalError("An error occurred while creating the case")
    db.refresh(case)

    logger.info("Case %s created for account %s", case.id, account.id)
    return case


def list_cases(db: Session, account_id: str) -> List[Case]:
    return (
        db.query(Case)
        .filter(Case.account_id == account_id)
        .order_by(Case.created_at.desc())
        .all()
    )


def get_case(db: Session, account_id: str, case_id: str) -> Case:
    case = db.query(Case).filter(Case.id == case_id, Case.account_id == account_id).first()
    if case is None:
        raise NotFoundError("Case not found")
    return case


def delete_case(db: Session, account_id: str, case_id: str, uploads_dir: str) -> None:
    case = get_case(db, account_id, case_id)
    file_url = case.file_url
    db.delete(case)
    db.commit()
    remove_case_files([file_url], uploads_dir)


def advance_case_status(db: Session, case: Case, new_status: CaseStatus, results: Optional[dict] = None) -> Case:
    """
    Move a case along PENDING -> PROCESSING -> COMPLETED/FAILED.
    COMPLETED and FAILED are terminal. Results are only kept on COMPLETED.
    """
    new_status = CaseStatus(new_status)
    if new_status not in ALLOWED_TRANSITIONS[case.status]:
        raise ValidationError(f"Cannot move case from {case.status.value} to {new_status.value}")

    case.status = new_status
    if new_status == CaseStatus.COMPLETED:
        case.results = results
    db.commit()
    db.refresh(case)

    logger.info("Case %s is now %s", case.id, new_status.value)
    return case
