class NotAuthorizedError(Exception):
    """Raised when the acting user lacks the admin role."""
