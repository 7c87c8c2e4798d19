"""
Base Pydantic Schemas
========================

Provides base classes and common functionality for all schemas using Pydantic V2.
"""

from pydantic import BaseModel, ConfigDict, model_validator, Field
from datetime import datetime
from typing import Optional, Any

class BaseSchema(BaseModel):
    """Base schema dengan common config, versi Pydantic V2."""

    model_config = ConfigDict(
        from_attributes=True,
        extra='ignore',
    )

    @model_validator(mode='before')
    @classmethod
    def strip_whitespace(cls, data: Any) -> Any:
        """Strip whitespace dari string fields sebelum validasi."""
        if isinstance(data, dict):
            data = dict(data)
            for key, value in data.items():
                if isinstance(value, str):
                    data[key] = value.strip()
        return data

class PaginationSchema(BaseModel):
    """Schema untuk pagination response, versi Pydantic V2."""
    page: int = Field(gt=0, description="Page must be at least 1")
    per_page: int = Field(gt=0, le=100, description="Per page must be between 1 and 100")
    pages: int
    total: int
    has_next: bool
    has_prev: bool

class TimestampMixin(BaseModel):
    """Mixin untuk timestamp fields."""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
