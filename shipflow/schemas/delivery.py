from pydantic import field_validator, model_validator
from typing import Optional, Any

from .base import BaseSchema
from .validators import validate_proof_type, validate_latitude, validate_longitude

class LocationSchema(BaseSchema):
    latitude: float
    longitude: float

    @field_validator('latitude')
    @classmethod
    def latitude_range(cls, v):
        return validate_latitude(v)

    @field_validator('longitude')
    @classmethod
    def longitude_range(cls, v):
        return validate_longitude(v)

class ConfirmDeliverySchema(BaseSchema):
    """Proof of delivery dari driver; proof_data berupa base64"""
    order_id: Optional[str] = None
    proof_type: Optional[str] = None
    proof_data: Optional[str] = None
    timestamp: Optional[str] = None
    location: Optional[LocationSchema] = None

    @field_validator('proof_type')
    @classmethod
    def proof_type_valid(cls, v):
        return validate_proof_type(v)

class ReportAnomalySchema(BaseSchema):
    order_id: Optional[str] = None
    error_message: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def strip_whitespace(cls, data: Any) -> Any:
        # error_message disimpan verbatim
        return data
