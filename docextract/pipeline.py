# docextract/pipeline.py
import logging
import os
import shutil
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from fastapi import UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from docextract.crud import insert_document, update_document_status_and_text
from docextract.exceptions import ProcessingError, ServiceError, StoreError, ValidationError
from docextract.extraction import ExtractionClient
from docextract.models import DocumentStatus

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "File processed and text extracted successfully."
FAILURE_TEXT = "Processing failed. Check logs."
DEFAULT_MIMETYPE = "application/octet-stream"

class UploadResponse(BaseModel):
    message: str
    documentId: int
    filename: str
    originalname: str

@dataclass
class StagedFile:
    path: str
    filename: str
    originalname: str
    mimetype: str
    size: int

def _storage_name(originalname: str) -> str:
    # Millisecond prefix keeps concurrent uploads of the same name apart
    return f"{int(time.time() * 1000)}-{os.path.basename(originalname)}"

@contextmanager
def staged_upload(upload: UploadFile, uploads_dir: str) -> Iterator[StagedFile]:
    """
    Writes the upload to the staging directory and removes it again on exit,
    whatever happened in between. A failed removal is only logged.
    """
    filename = _storage_name(upload.filename)
    file_path = os.path.join(uploads_dir, filename)
    try:
        try:
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
        except OSError as e:
            raise ProcessingError(f"Could not save file: {e}") from e

        yield StagedFile(
            path=file_path,
            filename=filename,
            originalname=upload.filename,
            mimetype=upload.content_type or DEFAULT_MIMETYPE,
            size=os.path.getsize(file_path),
        )
    finally:
        try:
            os.remove(file_path)
            logger.info(f"Deleted temp file {file_path}.")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Error deleting temp file {file_path}: {e}")

def _mark_failed(db: Session, document_id: int) -> None:
    try:
        update_document_status_and_text(db, document_id, DocumentStatus.ERROR, FAILURE_TEXT)
    except StoreError as e:
        logger.critical(f"Failed to update document (ID: {document_id}) status to 'error': {e}")

def process_upload(
    db: Session,
    upload: Optional[UploadFile],
    extractor: ExtractionClient,
    uploads_dir: str,
) -> UploadResponse:
    """
    Records the upload, sends it to the extraction service and stores the result.

    The record goes processing -> completed, or processing -> error when any
    step after the insert fails. The original error is re-raised in that case.
    """
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded.")

    with staged_upload(upload, uploads_dir) as staged:
        document_id = None
        try:
            document_id = insert_document(db, staged.filename, staged.originalname, staged.mimetype, staged.size)
            logger.info(f"Inserted document record with ID: {document_id}")

            logger.info(f"Sending file {staged.originalname} (ID: {document_id}) to extraction service...")
            with open(staged.path, "rb") as stream:
                extracted_text = extractor.extract(stream, staged.mimetype)
            logger.info(f"Extracted text from {staged.originalname} (ID: {document_id}).")

            update_document_status_and_text(db, document_id, DocumentStatus.COMPLETED, extracted_text)
            logger.info(f"Updated document (ID: {document_id}) status to 'completed'.")
        except Exception as e:
            logger.error(f"Error during document processing (ID: {document_id or 'N/A'}): {e}")
            if document_id is not None:
                _mark_failed(db, document_id)
            if isinstance(e, ServiceError):
                raise
            raise ProcessingError(str(e)) from e

        return UploadResponse(
            message=SUCCESS_MESSAGE,
            documentId=document_id,
            filename=staged.filename,
            originalname=staged.originalname,
        )
