"""
Custom exception classes for better error handling
"""
from typing import Optional, Dict, Any


class ShelfwiseException(Exception):
    """Base exception for all custom exceptions"""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class FirestoreException(ShelfwiseException):
    """Raised when Firestore operations fail"""
    status_code = 503


class ValidationException(ShelfwiseException):
    """Raised when input validation fails"""
    status_code = 400


class AuthenticationException(ShelfwiseException):
    """Raised when authentication fails"""
    status_code = 401


class AuthorizationException(ShelfwiseException):
    """Raised when user is not authorized"""
    status_code = 403


class ResourceNotFoundException(ShelfwiseException):
    """Raised when a requested resource is not found"""
    status_code = 404
