"""Database models."""
from facility_admin.models.document import Document
from facility_admin.models.identity import Identity, IdentityToken

__all__ = ["Document", "Identity", "IdentityToken"]
