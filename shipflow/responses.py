"""
API Response Models
===================

Standardized API response envelope.
"""

class APIResponse:
    """Standard API response format"""

    @staticmethod
    def success(data=None, message="Success"):
        return {
            "success": True,
            "message": message,
            "data": data
        }

    @staticmethod
    def error(message="Error", error_code=None, error=None, details=None, request_id=None):
        return {
            "success": False,
            "error": error,
            "error_code": error_code,
            "message": message,
            "details": details or {},
            "request_id": request_id
        }

    @staticmethod
    def paginated(data, pagination: dict, message="Success"):
        return {
            "success": True,
            "message": message,
            "data": data,
            "pagination": pagination
        }
