# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the domain logic:
# - models/: Pydantic schemas for data validation
# - services/: Meal, learning and health services, the funding state
#   machine, auth, profiles, notifications and chat history
#
# Services receive their collaborators (database handle, assistant, payment
# gateway) through their constructors and never build global instances.
# =============================================================================
