# docextract/exceptions.py
"""Error taxonomy shared by the store, the extraction client and the pipeline.

Each error carries the HTTP status the gateway answers with.
"""

class ServiceError(Exception):
    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Bad or missing input. Raised before any side effect."""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class StoreError(ServiceError):
    """A datastore statement failed."""


class ExtractionError(ServiceError):
    """The extraction service could not be reached or answered with an error."""


class ProcessingError(ServiceError):
    """Wraps failures outside the taxonomy above."""
