from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

# Create a declarative base which all models will inherit from
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, konsisten dengan kolom DateTime tanpa timezone."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Abstract base with the audit timestamps shared by every table.
# Primary keys are declared per model (order_id, shipment_id, ...).
class BaseModel(Base):
    __abstract__ = True
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
