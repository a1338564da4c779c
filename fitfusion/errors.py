# -*- coding: utf-8 -*-
"""Error taxonomy shared by the storage layer and the HTTP surface.

Storage functions raise these; the app translates them into
`{"success": false, "error": <kind>, "message": <message>}` responses.
Anything that is not an `AppError` is reported as an opaque internal error.
"""

from __future__ import annotations

from fastapi import HTTPException


class AppError(HTTPException):
    kind = "internal"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(status_code=self.http_status, detail=message)
        self.message = message


class ValidationError(AppError):
    kind = "validation_error"
    http_status = 400


class EmptyCart(ValidationError):
    def __init__(self, message: str = "No items in cart") -> None:
        super().__init__(message)


class Unauthorized(AppError):
    kind = "unauthorized"
    http_status = 401


class NotFound(AppError):
    kind = "not_found"
    http_status = 404


class Conflict(AppError):
    kind = "conflict"
    http_status = 409


class OutOfStock(AppError):
    kind = "out_of_stock"
    http_status = 400


class InternalError(AppError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


def error_payload(kind: str, message: str) -> dict:
    return {"success": False, "error": kind, "message": message}
