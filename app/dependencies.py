# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# This is the only place where settings are turned into service
# collaborators; the services themselves never read configuration.
# =============================================================================

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import settings
from core.services.listing_service import ListingService
from core.services.purchase_service import PurchaseLedger
from core.services.storage_service import FileStore
from lib.database import get_db


def get_file_store() -> FileStore:
    """
    Get a file store rooted at the configured upload directory.
    """
    return FileStore(settings.UPLOAD_LOCATION, url_prefix=settings.UPLOAD_URL_PREFIX)


# Type aliases for dependency injection
DbDep = Annotated[Session, Depends(get_db)]
FileStoreDep = Annotated[FileStore, Depends(get_file_store)]


def get_listing_service(db: DbDep, files: FileStoreDep) -> ListingService:
    return ListingService(db, files)


def get_purchase_ledger(db: DbDep) -> PurchaseLedger:
    return PurchaseLedger(db)


ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
PurchaseLedgerDep = Annotated[PurchaseLedger, Depends(get_purchase_ledger)]
