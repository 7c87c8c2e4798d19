"""
Custom Validators
=================

Custom validation functions untuk business rules
"""

import math

_PROOF_TYPES = ('photo', 'signature')

def validate_positive_number(value: float) -> float:
    """Validate positive number (inf dan NaN ditolak)"""
    if value is not None and (not math.isfinite(value) or value <= 0):
        raise ValueError('Value must be a positive finite number')
    return value

def validate_not_blank(value: str) -> str:
    """Validate string tidak kosong setelah strip"""
    if value is not None and not value.strip():
        raise ValueError('Value must not be blank')
    return value

def validate_proof_type(value: str) -> str:
    """Proof of delivery hanya berupa foto atau tanda tangan"""
    if value is not None and value.lower() not in _PROOF_TYPES:
        raise ValueError(f"Proof type must be one of: {', '.join(_PROOF_TYPES)}")
    return value.lower() if value is not None else value

def validate_latitude(value: float) -> float:
    if value is not None and not -90 <= value <= 90:
        raise ValueError('latitude must be between -90 and 90')
    return value

def validate_longitude(value: float) -> float:
    if value is not None and not -180 <= value <= 180:
        raise ValueError('longitude must be between -180 and 180')
    return value
