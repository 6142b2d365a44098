"""
ParcelBD Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the different failure scenarios.
How:   Each class declares the HTTP status and machine-readable error code it
       maps to; instances carry a message and an optional context dict.
       A single handler in main.py renders any ParcelBDError from those.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    ParcelBDError (base)          → 500 server_error
    ├── ValidationError           → 400 validation_error
    ├── NotFoundError             → 404 not_found
    ├── InvalidIdentifierError    → 500 invalid_identifier (writes addressed by a malformed id)
    ├── DatabaseError             → 500 database_error
    └── PaymentGatewayError       → 500 payment_gateway_error (provider message echoed)
"""

from typing import Any, Dict, Optional


class ParcelBDError(Exception):
    """
    Base exception for all ParcelBD application errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional info, always logged; returned as `details`
                  only when `expose_context` is set on the class
    """

    status_code = 500
    error_code = "server_error"
    expose_context = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(message)


class ValidationError(ParcelBDError):
    """
    Client input rejected before anything was written.

    Examples: missing sender/receiver name, missing amountInCents,
    a non-string value for a known parcel column.

        {
            "error": "validation_error",
            "message": "Sender & Receiver required!",
            "details": {"field": "sender_name"}
        }
    """

    status_code = 400
    error_code = "validation_error"
    expose_context = True

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.field = field
        if field:
            self.context["field"] = field


class NotFoundError(ParcelBDError):
    """
    GET /parcels/{id} for an unknown or malformed id, or
    POST /parcels/{id}/paid when no unpaid parcel matched.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        super().__init__(message=message, context=context)
        self.context["resource"] = resource
        if resource_id:
            self.context["resource_id"] = resource_id


class InvalidIdentifierError(ParcelBDError):
    """
    PUT, DELETE or POST /paid addressed a parcel id that is not a valid
    identifier. Reads treat such ids as not found instead.
    """

    status_code = 500
    error_code = "invalid_identifier"

    def __init__(self, parcel_id: str, action: str):
        super().__init__(
            message=f"Failed to {action} parcel: '{parcel_id}' is not a valid parcel identifier",
            context={"parcel_id": parcel_id},
        )


class DatabaseError(ParcelBDError):
    """Query or commit failed (connection lost, constraint violation, bad value type)."""

    status_code = 500
    error_code = "database_error"


class PaymentGatewayError(ParcelBDError):
    """The payment provider rejected the request or could not be reached."""

    status_code = 500
    error_code = "payment_gateway_error"
