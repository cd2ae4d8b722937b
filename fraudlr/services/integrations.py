import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from fraudlr.core.exceptions import NotFoundError, ValidationError
from fraudlr.models.account import Account
from fraudlr.models.integration import Integration, IntegrationType
from fraudlr.services.usage import check_integration_limit

logger = logging.getLogger(__name__)


def serialize_integration(integration: Integration) -> dict:
    return {
        "id": integration.id,
        "name": integration.name,
        "type": integration.type.value,
        "config": integration.config,
        "isActive": integration.is_active,
        "createdAt": integration.created_at.isoformat() if integration.created_at else None,
        "updatedAt": integration.updated_at.isoformat() if integration.updated_at else None,
    }


def create_integration(
    db: Session,
    account: Account,
    name: Optional[str],
    integration_type: Optional[str],
    config: Optional[dict],
) -> Integration:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Integration name is required")
    try:
        kind = IntegrationType((integration_type or "").upper())
    except ValueError:
        raise ValidationError("Integration type must be API or SQL")

    check_integration_limit(db, account.subscription)

    integration = Integration(
        account_id=account.id,
        name=name,
        type=kind,
        config=config or {},
        is_active=True,
    )
    db.add(integration)
    db.commit()
    db.refresh(integration)

    logger.info("Integration %s (%s) created for account %s", integration.id, kind.value, account.id)
    return integration


def list_integrations(db: Session, account_id: str) -> List[Integration]:
    return (
        db.query(Integration)
        .filter(Integration.account_id == account_id)
        .order_by(Integration.created_at.desc())
        .all()
    )


def set_integration_active(db: Session, account: Account, integration_id: str, is_active: bool) -> Integration:
    """Activate or deactivate an integration. Integrations are never hard-deleted here."""
    integration = db.query(Integration).filter(
        Integration.id == integration_id,
        Integration.account_id == account.id,
    ).first()
    if integration is None:
        raise NotFoundError("Integration not found")

    if is_active and not integration.is_active:
        check_integration_limit(db, account.subscription, exclude_id=integration.id)

    integration.is_active = is_active
    db.commit()
    db.refresh(integration)
    return integration
