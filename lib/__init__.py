# =============================================================================
# lib/ - Standalone Infrastructure Modules
# =============================================================================
# This package contains reusable infrastructure:
# - database.py: SQLAlchemy engine, declarative base and request sessions
#
# Imported explicitly (from lib.database import ...) to keep startup lean.
# =============================================================================
