"""
API endpoints for managing external data integrations (API and SQL connections).
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fraudlr.db.session import get_db
from fraudlr.dependencies.auth import get_current_account, get_current_account_id
from fraudlr.models.account import Account
from fraudlr.schemas.integration import IntegrationCreate, IntegrationUpdate
from fraudlr.services import integrations as integration_service

router = APIRouter()


@router.post("/integrations", status_code=status.HTTP_201_CREATED)
def create_integration(
    body: IntegrationCreate,
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
):
    integration = integration_service.create_integration(db, account, body.name, body.type, body.config)
    return {"integration": integration_service.serialize_integration(integration)}


@router.get("/integrations")
def list_integrations(
    db: Session = Depends(get_db),
    account_id: str = Depends(get_current_account_id),
):
    items = integration_service.list_integrations(db, account_id)
    return {"integrations": [integration_service.serialize_integration(i) for i in items]}


@router.patch("/integrations/{integration_id}")
def update_integration(
    integration_id: str,
    body: IntegrationUpdate,
    db: Session = Depends(get_db),
    account: Account = Depends(get_current_account),
):
    """Activate or deactivate an integration (there is no hard delete)."""
    integration = integration_service.set_integration_active(db, account, integration_id, body.is_active)
    return {"integration": integration_service.serialize_integration(integration)}
