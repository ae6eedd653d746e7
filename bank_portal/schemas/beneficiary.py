import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class BeneficiaryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    relationship: str = Field(min_length=1, max_length=50)
    percentage: Decimal = Field(gt=0, le=100, decimal_places=2)
    contact_info: str | None = Field(None, max_length=255)
    date_of_birth: date | None = None
    address: str | None = Field(None, max_length=255)


class BeneficiaryUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    relationship: str | None = Field(None, min_length=1, max_length=50)
    percentage: Decimal | None = Field(None, gt=0, le=100, decimal_places=2)
    contact_info: str | None = Field(None, max_length=255)
    address: str | None = Field(None, max_length=255)


class BeneficiaryResponse(BaseModel):
    id: uuid.UUID
    name: str
    relationship: str = Field(validation_alias="relationship_type")
    percentage: Decimal
    contact_info: str | None
    date_of_birth: date | None
    address: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}
