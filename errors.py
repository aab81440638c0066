"""Error types shared by the dialogue, the API and the client."""

from typing import List, Optional


class ListingServiceError(Exception):
    """Base exception for the listing service."""
    status_code = 500

    def __init__(self, message: str = "Server Error"):
        super().__init__(message)
        self.message = message


# Dialogue / input errors

class UnknownFieldError(ListingServiceError):
    """No normalizer exists for the requested field."""
    pass


class InvalidResponseError(ListingServiceError):
    """A transcript normalized to an empty value for a field that needs one."""

    def __init__(self, field_id: str):
        super().__init__(f"Please provide a valid {field_id}")
        self.field_id = field_id


class MissingFieldError(ListingServiceError):
    """The current step cannot be left while its field is empty."""

    def __init__(self, field_id: str):
        super().__init__(f"Please provide a value for {field_id}")
        self.field_id = field_id


class DialogueStateError(ListingServiceError):
    """Operation not allowed in the dialogue's current state."""
    pass


class SpeechRecognitionError(ListingServiceError):
    """Speech source failed (device, permission, network)."""
    pass


# Server errors

class SubmissionValidationError(ListingServiceError):
    """One or more listing fields failed validation."""
    status_code = 400

    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)


class PhotoUploadError(ListingServiceError):
    """Uploaded file rejected (type, size or count)."""
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(f"File upload error: {reason}")


class PropertyNotFoundError(ListingServiceError):
    status_code = 404

    def __init__(self, property_id: Optional[str] = None):
        super().__init__("Property not found")
        self.property_id = property_id


class DatabaseUnavailableError(ListingServiceError):
    """Database not configured or unreachable."""
    pass


# Client errors

class ApiError(ListingServiceError):
    """The listing API answered with an error or could not be reached."""

    def __init__(self, messages: List[str], status_code: Optional[int] = None):
        super().__init__("; ".join(messages) if messages else "Request failed")
        self.messages = list(messages)
        self.status_code = status_code
