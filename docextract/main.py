# docextract/main.py
import logging
import re
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from docextract.config import settings
from docextract.crud import (
    DocumentResponse, DocumentStatusResponse, get_all_documents, get_document_by_id
)
from docextract.database import create_db_engine, create_session_factory, get_db, init_db
from docextract.exceptions import NotFoundError, ServiceError, ValidationError
from docextract.extraction import ExtractionClient, get_extractor
from docextract.pipeline import UploadResponse, process_upload

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "An unexpected error occurred."
DOCUMENT_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

app = FastAPI(
    title="Document Text Extraction Service",
    description="Upload documents, extract their text and check processing status.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"Error handling {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message or FALLBACK_ERROR_MESSAGE})

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request shapes FastAPI rejects are answered like any other bad input."""
    if any(tuple(error.get("loc", ()))[-1:] == ("document",) for error in exc.errors()):
        message = "No file uploaded."
    else:
        message = "Invalid request."
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": str(exc) or FALLBACK_ERROR_MESSAGE},
    )

@app.on_event("startup")
def startup_event():
    """
    Builds the database engine and the extraction client and makes sure the
    documents table exists. Any failure here aborts startup.
    """
    if not settings.DATABASE_URL:
        logger.critical("FATAL: DATABASE_URL environment variable is not set.")
        raise RuntimeError("DATABASE_URL environment variable is not set.")

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        init_db(engine)
    except Exception as e:
        logger.critical(f"Error initializing database: {e}")
        engine.dispose()
        raise

    app.state.engine = engine
    app.state.SessionLocal = create_session_factory(engine)
    app.state.extractor = ExtractionClient(settings.TIKA_URL)
    logger.info(f"Extraction service endpoint: {settings.TIKA_URL}")

@app.on_event("shutdown")
def shutdown_event():
    extractor = getattr(app.state, "extractor", None)
    if extractor is not None:
        extractor.close()
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        engine.dispose()

def _parse_document_id(raw_id: str) -> int:
    if not DOCUMENT_ID_PATTERN.fullmatch(raw_id):
        raise ValidationError("Invalid document ID.")
    return int(raw_id)

def _load_document(db: Session, raw_id: str):
    db_document = get_document_by_id(db, _parse_document_id(raw_id))
    if db_document is None:
        raise NotFoundError("Document not found.")
    return db_document

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Backend server is running!"

@app.options("/api/upload")
async def upload_preflight():
    """Answers preflight requests the CORS middleware lets through."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@app.post("/api/upload", response_model=UploadResponse)
def upload_document(
    document: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    extractor: ExtractionClient = Depends(get_extractor),
):
    """
    Stages the uploaded file, records it, sends it to the extraction service
    and stores the extracted text. The staged file is removed afterwards.
    """
    return process_upload(db, document, extractor, settings.UPLOADS_DIR)

@app.get("/api/document/{doc_id}", response_model=DocumentResponse)
def get_document(doc_id: str, db: Session = Depends(get_db)):
    return DocumentResponse.model_validate(_load_document(db, doc_id))

@app.get("/api/document/{doc_id}/status", response_model=DocumentStatusResponse)
def get_document_status(doc_id: str, db: Session = Depends(get_db)):
    return DocumentStatusResponse.model_validate(_load_document(db, doc_id))

@app.get("/api/documents", response_model=List[DocumentResponse])
def list_documents(db: Session = Depends(get_db)):
    """Retrieves every document, most recently uploaded first."""
    return [DocumentResponse.model_validate(doc) for doc in get_all_documents(db)]

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("docextract.main:app", host=settings.HOST, port=settings.PORT)
