# =============================================================================
# app/routers/software.py - Marketplace Endpoints
# =============================================================================
# Upload, browse, edit, delete and purchase software listings.
#
# Auth rules:
# - list and get-by-id are public
# - upload, update, my-uploads, my-purchases, purchase, debug need a token
# - update needs owner or admin; delete needs admin
# =============================================================================

import logging
import os
from typing import Annotated

from fastapi import APIRouter, File, Form, Path, UploadFile
from fastapi.responses import PlainTextResponse

from app.auth import CurrentUsername, Identity
from app.dependencies import ListingServiceDep, PurchaseLedgerDep
from core.models import OwnershipReport, PurchaseResponse, SoftwareResponse
from core.services.storage_service import IncomingFile

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def _incoming(upload: UploadFile | None) -> IncomingFile | None:
    """Describe an UploadFile to the services."""
    if upload is None:
        return None
    size = upload.size
    if size is None:
        upload.file.seek(0, os.SEEK_END)
        size = upload.file.tell()
        upload.file.seek(0)
    return IncomingFile(filename=upload.filename, stream=upload.file, size=size)


# Multipart fields are optional at the HTTP layer so that missing values
# reach the service's ordered validation and come back as 400s
TitleForm = Annotated[str | None, Form(description="Listing title")]
VideoFile = Annotated[UploadFile | None, File(description="Demo video")]
ZipFile = Annotated[UploadFile | None, File(alias="zipFile", description="ZIP archive")]
PriceForm = Annotated[str | None, Form(description="Price, greater than 0")]
SoftwareId = Annotated[int, Path(description="Software ID")]


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/upload", response_model=SoftwareResponse)
def upload_software(
    username: CurrentUsername,
    listings: ListingServiceDep,
    title: TitleForm = None,
    video: VideoFile = None,
    zip_file: ZipFile = None,
    price: PriceForm = None,
):
    """
    Upload a new listing: title, demo video, ZIP archive and price.

    The listing is owned by the token's user; there is no way to upload
    on someone else's behalf.
    """
    logger.info(f"Upload request from {username}: {title!r}")
    return listings.create(
        identity=username,
        title=title,
        video=_incoming(video),
        zip_file=_incoming(zip_file),
        price=price,
    )


@router.put("/update/{software_id}", response_model=SoftwareResponse)
def update_software(
    software_id: SoftwareId,
    username: CurrentUsername,
    listings: ListingServiceDep,
    title: TitleForm = None,
    video: VideoFile = None,
    zip_file: ZipFile = None,
    price: PriceForm = None,
):
    """
    Update a listing. Owner or admin only.

    Every field is optional; a blank title or a non-positive price is
    ignored. New files replace the old ones.
    """
    return listings.update(
        software_id,
        identity=username,
        title=title,
        video=_incoming(video),
        zip_file=_incoming(zip_file),
        price=price,
    )


@router.delete("/delete/{software_id}", response_class=PlainTextResponse)
def delete_software(
    software_id: SoftwareId,
    identity: Identity,
    listings: ListingServiceDep,
):
    """
    Delete a listing and its files. Admin only.
    """
    listings.delete(software_id, identity)
    return "Software deleted successfully"


@router.get("/list", response_model=list[SoftwareResponse])
def list_software(listings: ListingServiceDep):
    """
    List every listing in the marketplace. No authentication needed.
    """
    return listings.list_all()


@router.get("/my-uploads", response_model=list[SoftwareResponse])
def my_uploads(username: CurrentUsername, ledger: PurchaseLedgerDep):
    """
    Listings uploaded by the caller.
    """
    return ledger.list_uploads(username)


@router.get("/my-purchases", response_model=list[PurchaseResponse])
def my_purchases(username: CurrentUsername, ledger: PurchaseLedgerDep):
    """
    Purchases made by the caller.
    """
    return ledger.list_purchases(username)


@router.post("/purchase/{software_id}", response_model=PurchaseResponse)
def purchase_software(
    software_id: SoftwareId,
    username: CurrentUsername,
    ledger: PurchaseLedgerDep,
):
    """
    Buy a listing. Each user can buy a listing once; a repeat returns 409.
    """
    return ledger.purchase(username, software_id)


@router.get("/debug/{software_id}", response_model=OwnershipReport)
def debug_software(
    software_id: SoftwareId,
    username: CurrentUsername,
    listings: ListingServiceDep,
):
    """
    Show who owns a listing and whether the caller may edit it.
    """
    return listings.describe_ownership(software_id, username)


@router.get("/{software_id}", response_model=SoftwareResponse)
def get_software(software_id: SoftwareId, listings: ListingServiceDep):
    """
    Get a single listing.
    """
    return listings.get(software_id)
