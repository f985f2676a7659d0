# docextract/models.py
import enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from docextract.database import Base

class DocumentStatus(str, enum.Enum):
    PENDING = "pending" # declared for compatibility, never produced by the upload pipeline
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

class Document(Base):
    """SQLAlchemy model for an uploaded file and its extraction outcome."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False) # Name of the staged file on the server
    originalname = Column(String(255), nullable=False) # Name the client uploaded
    mimetype = Column(String(100))
    size = Column(BigInteger)
    status = Column(String(50), default=DocumentStatus.PROCESSING.value)
    extracted_text = Column(Text, nullable=True)
    upload_timestamp = Column(DateTime(timezone=True), server_default=func.now())
    processing_timestamp = Column(DateTime(timezone=True), nullable=True)
