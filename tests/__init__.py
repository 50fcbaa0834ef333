# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Software Marketplace API:
# - test_storage_service.py: File store and file transactions
# - test_auth.py: Bearer token -> username resolution
# - test_authorization_service.py: Owner/admin checks
# - test_listing_service.py: Listing create/update/delete lifecycle
# - test_purchase_service.py: Purchase ledger
# - test_models.py: Response schema serialization
# - test_software_api.py: HTTP endpoints end to end
#
# Run tests with: pytest
# =============================================================================
