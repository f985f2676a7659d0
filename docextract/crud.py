# docextract/crud.py
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from docextract.exceptions import StoreError
from docextract.models import Document as DBDocument, DocumentStatus

logger = logging.getLogger(__name__)

# Pydantic models for response bodies
class DocumentResponse(BaseModel):
    id: int
    filename: str
    originalname: str
    mimetype: Optional[str] = None
    size: Optional[int] = None
    status: str
    extracted_text: Optional[str] = None
    upload_timestamp: Optional[datetime] = None
    processing_timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True # Allow Pydantic to read ORM models

class DocumentStatusResponse(BaseModel):
    id: int
    status: str

    class Config:
        from_attributes = True

def insert_document(db: Session, filename: str, originalname: str, mimetype: str, size: int) -> int:
    """Creates a document record in 'processing' state and returns its id."""
    db_document = DBDocument(
        filename=filename,
        originalname=originalname,
        mimetype=mimetype,
        size=size,
        status=DocumentStatus.PROCESSING.value,
    )
    try:
        db.add(db_document)
        db.commit()
        db.refresh(db_document)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to insert document '{originalname}': {e}")
        raise StoreError(f"Could not store document metadata: {e}") from e
    return db_document.id

def update_document_status_and_text(
    db: Session, doc_id: int, status: DocumentStatus, extracted_text: Optional[str] = None
) -> None:
    """
    Sets status, extracted text and processing timestamp.
    Updating an id that doesn't exist affects no rows and is not an error.
    """
    try:
        db.query(DBDocument).filter(DBDocument.id == doc_id).update(
            {
                DBDocument.status: DocumentStatus(status).value,
                DBDocument.extracted_text: extracted_text,
                DBDocument.processing_timestamp: func.now(),
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update document (ID: {doc_id}): {e}")
        raise StoreError(f"Could not update document {doc_id}: {e}") from e

def get_document_by_id(db: Session, doc_id: int) -> Optional[DBDocument]:
    """Retrieves a document by its id, or None."""
    try:
        return db.query(DBDocument).filter(DBDocument.id == doc_id).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Could not read document {doc_id}: {e}") from e

def get_all_documents(db: Session) -> List[DBDocument]:
    """Retrieves every document, most recently uploaded first."""
    try:
        return (
            db.query(DBDocument)
            .order_by(DBDocument.upload_timestamp.desc(), DBDocument.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Could not list documents: {e}") from e
