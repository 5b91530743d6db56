"""Error taxonomy shared by the pipeline, cache and workflow controller."""

from __future__ import annotations


class CareerMatchError(Exception):
    """Base class for every recoverable failure surfaced to the user."""


class UnsupportedDocumentType(CareerMatchError):
    """The uploaded file type is not one we can extract text from."""


class DocumentReadError(CareerMatchError):
    """Text extraction itself failed (corrupt or oversized file)."""


class ExtractionTooShort(CareerMatchError):
    """Sanitized document text is below the minimum usable length."""

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Could not read enough text from the file ({length} < {minimum} characters). "
            "Try a different file; scanned PDFs without a text layer are not supported."
        )


class ServiceError(CareerMatchError):
    """The completion service was unreachable or returned an error."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"API {status}: {message}")


class ParseFailure(CareerMatchError):
    """No structured value could be recovered from generated text."""


class ValidationFailure(CareerMatchError):
    """A structured value was parsed but does not have the required shape."""


class GenerationInFlight(CareerMatchError):
    """A generation for the same key is already pending."""


class StaleGeneration(CareerMatchError):
    """A generation finished after its listing set was replaced."""
