"""
ParcelBD Backend — Shared Pydantic Schemas
===========================================

What:  Write-result envelopes, error and health response models.
How:   Field names are snake_case in Python and camelCase on the wire
       (`alias_generator=to_camel`), matching the document-store style the
       frontend already consumes: `insertedId`, `matchedCount`, `deletedCount`.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Write Results
# ══════════════════════════════════════════════════════════════════════════


class InsertResult(BaseModel):
    """Returned by POST /parcels and nested in the payment-history response."""
    model_config = CAMEL_CONFIG

    acknowledged: bool = True
    inserted_id: str = Field(description="Generated identifier of the new document")


class UpdateResult(BaseModel):
    """
    Returned by PUT /parcels/{id} and POST /parcels/{id}/paid.

    matched_count == 0 means the id did not exist; PUT reports that silently.
    modified_count counts documents whose stored values actually changed.
    """
    model_config = CAMEL_CONFIG

    acknowledged: bool = True
    matched_count: int = 0
    modified_count: int = 0
    upserted_id: Optional[str] = None
    upserted_count: int = 0


class DeleteResult(BaseModel):
    """Returned by DELETE /parcels/{id}; deleted_count is 0 or 1."""
    model_config = CAMEL_CONFIG

    acknowledged: bool = True
    deleted_count: int = 0


# ══════════════════════════════════════════════════════════════════════════
# Error / Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Sender & Receiver required!",
            "details": {"field": "sender_name"},
            "request_id": "1f3a9c2e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    payment_gateway: str = Field(description="Payment gateway: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
