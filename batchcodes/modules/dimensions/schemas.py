from datetime import datetime
from pydantic import BaseModel, Field
from batchcodes.modules.dimensions.types import DimensionStatus

# code shape (width, charset) is checked by the registry so callers get a typed invalid_code error
class DimensionSetCreate(BaseModel):
    funding_source_code: str = Field(..., max_length=1)
    funding_source_name: str = Field(..., min_length=1, max_length=255)
    medicine_type_code: str = Field(..., max_length=1)
    medicine_type_name: str = Field(..., min_length=1, max_length=255)
    active_ingredient_code: str = Field(..., max_length=3)
    active_ingredient_name: str = Field(..., min_length=1, max_length=255)
    producer_code: str = Field(..., max_length=1)
    producer_name: str = Field(..., min_length=1, max_length=255)
    package_type_code: str = Field(default="", max_length=1)
    package_type_name: str = Field(default="", max_length=255)

class DimensionSetUpdate(BaseModel):
    funding_source_name: str | None = Field(default=None, min_length=1, max_length=255)
    medicine_type_name: str | None = Field(default=None, min_length=1, max_length=255)
    active_ingredient_name: str | None = Field(default=None, min_length=1, max_length=255)
    producer_name: str | None = Field(default=None, min_length=1, max_length=255)
    package_type_name: str | None = Field(default=None, min_length=1, max_length=255)
    status: DimensionStatus | None = None

class DimensionSetOut(BaseModel):
    id: str
    funding_source_code: str
    funding_source_name: str
    medicine_type_code: str
    medicine_type_name: str
    active_ingredient_code: str
    active_ingredient_name: str
    producer_code: str
    producer_name: str
    package_type_code: str
    package_type_name: str
    status: DimensionStatus
    created_by: str | None
    updated_by: str | None
    created_at: datetime | None
    updated_at: datetime | None

    class Config:
        from_attributes = True
