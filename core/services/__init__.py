# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .authorization_service import AuthorizationService, find_user
from .listing_service import ListingService, parse_price
from .purchase_service import PurchaseLedger
from .storage_service import FileStore, FileTransaction, IncomingFile

__all__ = [
    "AuthorizationService",
    "FileStore",
    "FileTransaction",
    "IncomingFile",
    "ListingService",
    "PurchaseLedger",
    "find_user",
    "parse_price",
]
