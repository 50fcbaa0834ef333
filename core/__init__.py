# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the marketplace business logic:
# - models/: ORM tables and Pydantic response schemas
# - services/: authorization, file storage, listing lifecycle, purchases
#
# Services never see a request object. They receive their collaborators
# (database session, file store) when constructed, which keeps them
# testable without an HTTP client.
# =============================================================================
