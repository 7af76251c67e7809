class VerificationError(Exception):
    """Base exception for verification workflow errors."""


class UserNotFoundError(VerificationError):
    """Raised when no user with the given ID exists."""


class NoDocumentSubmittedError(VerificationError):
    """Raised when a review action needs a document the user never submitted."""
