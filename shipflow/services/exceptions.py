"""
Custom Exceptions untuk Shipflow Services
=========================================

Taksonomi error tertutup yang dipakai business logic:
ValidationError, NotFoundError, ConflictError, DependencyError, InternalError.
Nama class exception internal (SQLAlchemy, requests, ...) tidak pernah
dikirim ke caller.
"""

class ShipflowException(Exception):
    """Base exception untuk semua Shipflow errors"""
    def __init__(self, message, error_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self):
        return {
            'message': self.message,
            'error_code': self.error_code,
            'details': self.details
        }

class ValidationError(ShipflowException):
    """Input kosong atau tidak valid; tidak pernah sampai ke store"""
    def __init__(self, message, field=None, details=None, error_code='VALIDATION_ERROR'):
        super().__init__(message, error_code, details)
        self.field = field
        if field and 'field' not in self.details:
            self.details['field'] = field

class OrderNotValidError(ValidationError):
    """Order di dalam batch shipment tidak ada atau bukan Pending"""
    def __init__(self, order_id, reason=None, details=None):
        message = f"Order {order_id} not found or not eligible for shipment"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, field='order_ids', details=details, error_code='ORDER_NOT_VALID')
        self.order_id = order_id

class NotFoundError(ShipflowException):
    """Error ketika resource tidak ditemukan"""
    def __init__(self, resource_type, resource_id, details=None, error_code='NOT_FOUND'):
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, error_code, details)
        self.resource_type = resource_type
        self.resource_id = resource_id

class CarrierNotFoundError(NotFoundError):
    def __init__(self, carrier_id, details=None):
        super().__init__('Carrier', carrier_id, details, error_code='CARRIER_NOT_FOUND')

class ConflictError(ShipflowException):
    """Precondition state dilanggar (mis. carrier sudah di-assign)"""
    def __init__(self, message, resource_type=None, details=None, error_code='CONFLICT_ERROR'):
        super().__init__(message, error_code, details)
        self.resource_type = resource_type

class NoDriverAvailableError(ConflictError):
    def __init__(self, carrier_id, details=None):
        super().__init__(
            f"No drivers available for carrier {carrier_id}",
            'Driver', details, error_code='NO_DRIVER_AVAILABLE'
        )
        self.carrier_id = carrier_id

class DependencyError(ShipflowException):
    """Kegagalan collaborator (directory, notification)"""
    def __init__(self, service_name, message, details=None):
        super().__init__(f"{service_name}: {message}", 'DEPENDENCY_ERROR', details)
        self.service_name = service_name

class InternalError(ShipflowException):
    """Kegagalan store/transport; dilaporkan generik ke caller"""
    def __init__(self, message="An internal error occurred", details=None):
        super().__init__(message, 'INTERNAL_ERROR', details)
