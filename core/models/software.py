# =============================================================================
# core/models/software.py - Listing Schemas
# =============================================================================
# These models define the API contract for listings:
# - SoftwareResponse: a listing as returned to clients
# - OwnershipReport: diagnostic view of who may edit a listing
#
# Field names are snake_case in Python and camelCase on the wire
# (videoUrl, zipUrl, uploadedBy, ...).
# =============================================================================

from decimal import Decimal
from typing import Annotated

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Prices are exact decimals internally and plain JSON numbers on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class ApiModel(BaseModel):
    """Base for response models: read from ORM rows, emit camelCase JSON."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


class SoftwareResponse(ApiModel):
    """
    A listing as returned by the upload, update, list and get endpoints.

    Example:
        {
            "id": 1,
            "title": "Tool A",
            "videoUrl": "/uploads/2b6f...c1.mp4",
            "zipUrl": "/uploads/9e02...7a.zip",
            "price": 9.99,
            "uploadedBy": "alice"
        }
    """

    id: int
    title: str = Field(..., min_length=1)
    video_url: str
    zip_url: str
    price: Money = Field(..., gt=0)
    uploaded_by: str


class OwnershipReport(ApiModel):
    """Who uploaded a listing and whether the caller may edit it."""

    software_id: int
    software_title: str
    uploaded_by: str | None
    current_user: str
    is_owner: bool
    is_admin: bool
    can_edit: bool
