from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class IntegrationCreate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None  # "API" or "SQL"
    config: Optional[Dict[str, Any]] = None  # Connection details, stored as-is


class IntegrationUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(alias="isActive")
