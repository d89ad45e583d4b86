"""Domain errors raised by SeedNode services.

Routers translate these into HTTP responses. Messages are safe to show to
clients; daemon output and stack traces are only ever logged.
"""


class SeedNodeError(Exception):
    """Base class for all domain errors."""

    message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFoundError(SeedNodeError):
    message = "Not found"


class TrackNotFoundError(NotFoundError):
    message = "Track not found"


class ContentNotFoundError(NotFoundError):
    message = "Content not found"


class InvalidInputError(SeedNodeError):
    message = "Invalid request"


class UnsupportedFormatError(InvalidInputError):
    message = "No audio file provided or unsupported format"


class PayloadTooLargeError(InvalidInputError):
    message = "File too large"


class InvalidContentIdError(InvalidInputError):
    message = "Invalid content identifier format"


class StoreUnavailableError(SeedNodeError):
    """The content store daemon is unreachable or returned an error."""

    message = "Content store unavailable"


class RangeNotSatisfiableError(SeedNodeError):
    message = "Range not satisfiable"

    def __init__(self, total_size: int, message: str | None = None) -> None:
        super().__init__(message)
        self.total_size = total_size
