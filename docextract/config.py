# docextract/config.py
import os
from dotenv import load_dotenv

load_dotenv() # Load environment variables from .env file

class Settings:
    # Database settings (required, checked at startup)
    DATABASE_URL: str = os.getenv("DATABASE_URL")

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3001"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Text extraction service (Apache Tika)
    TIKA_URL: str = os.getenv("TIKA_URL", "http://localhost:9998/tika")

    # Only the local web client may call the API
    CORS_ORIGIN: str = "http://localhost:3000"

    # Paths
    UPLOADS_DIR: str = os.getenv("UPLOADS_DIR", "uploads")

settings = Settings()

# Create the staging directory if it doesn't exist
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
