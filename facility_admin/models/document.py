"""Schemaless document model."""
from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from facility_admin.core.database import Base


class Document(Base):
    """A single document of a nested collection such as projects/{id}/courts."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String, nullable=False, index=True)  # full collection path
    doc_id = Column(String, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
    )
