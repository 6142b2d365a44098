"""
ParcelBD Backend — Parcel Schemas
==================================

Parcels are open documents: clients may send any fields, so request bodies
are plain JSON objects (`Dict[str, Any]`) and responses are the stored
document rendered by `ParcelService.to_document`. Only the envelopes around
them are modelled here.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from parcelbd.schemas.common import CAMEL_CONFIG, UpdateResult

# A parcel as returned to clients: `_id`, the known columns, plus extra fields.
ParcelDocument = Dict[str, Any]


class MarkPaidResponse(BaseModel):
    """Returned by POST /parcels/{id}/paid on success."""
    model_config = CAMEL_CONFIG

    message: str = Field(default="Parcel marked as paid")
    update_parcel: UpdateResult
