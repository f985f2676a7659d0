# docextract/extraction.py
import logging
from typing import BinaryIO, Iterator, Optional

import httpx
from fastapi import Request

from docextract.exceptions import ExtractionError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

def _iter_chunks(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk

class ExtractionClient:
    """
    Sends file bytes to an Apache Tika style endpoint and returns the plain text.

    No timeout is applied; the extraction service decides how long a request takes.
    """

    def __init__(self, endpoint: str, client: Optional[httpx.Client] = None):
        self.endpoint = endpoint
        self._client = client or httpx.Client(timeout=None)

    def extract(self, stream: BinaryIO, content_type: str) -> str:
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "Accept": "text/plain",
        }
        try:
            response = self._client.put(self.endpoint, content=_iter_chunks(stream), headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Text extraction request to {self.endpoint} failed: {e}")
            raise ExtractionError(f"Text extraction failed: {e}") from e
        return response.text

    def close(self) -> None:
        self._client.close()

def get_extractor(request: Request) -> ExtractionClient:
    """Dependency returning the client created at startup."""
    return request.app.state.extractor
