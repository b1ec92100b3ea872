"""
Standardized API response models
"""
from typing import Any, Optional, Dict
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Standard success response"""
    success: bool = True
    message: str
    data: Optional[Any] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Book removed from shelf successfully",
                "data": {"bookId": "abc123"}
            }
        }


class ErrorResponse(BaseModel):
    """Standard error response"""
    success: bool = False
    error: str
    details: Optional[Dict[str, Any]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "Book not on shelf",
                "details": {"book_id": "abc123"}
            }
        }


def success_response(message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """Helper function to create success response"""
    response = {"success": True, "message": message}
    if data is not None:
        response["data"] = data
    return response


def error_response(error: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Helper function to create error response"""
    response = {"success": False, "error": error}
    if details:
        response["details"] = details
    return response
