from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Union


class ApiError(HTTPException):
    status_code_name = "internal"
    http_status = 500

    def __init__(self, detail: str):
        super().__init__(status_code=self.http_status, detail=detail)


class UnauthenticatedError(ApiError):
    status_code_name = "unauthenticated"
    http_status = 401


class InvalidArgumentError(ApiError):
    status_code_name = "invalid-argument"
    http_status = 400


class InternalError(ApiError):
    status_code_name = "internal"
    http_status = 500


async def api_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": getattr(exc, "status_code_name", "error"),
            "message": exc.detail
        }
    )


async def validation_exception_handler(request: Request, exc: Union[RequestValidationError, ValidationError]):
    """
    Handle validation errors from both request and response models
    """
    error_messages = []
    for error in exc.errors():
        field_name = " -> ".join([str(x) for x in error["loc"]])
        error_messages.append(f"Field {field_name}: {error.get('msg', '')}")

    return JSONResponse(
        status_code=400,
        content={
            "status": InvalidArgumentError.status_code_name,
            "message": "Invalid request data",
            "errors": error_messages
        }
    )
