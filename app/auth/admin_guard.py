from app.auth.exceptions import NotAuthorizedError
from app.database.repositories.user_verification_repository import (
    UserVerificationRepository,
)
from app.logging.logger import Log

ADMIN_ROLE = "admin"


class AdminGuard:
    """Role check run before any admin review action."""

    def __init__(self, repository: UserVerificationRepository) -> None:
        self._repository = repository

    def require_admin(self, user_id: int) -> None:
        """Raises NotAuthorizedError unless the user exists and is an admin."""
        role = self._repository.find_role(user_id)
        if role != ADMIN_ROLE:
            Log.warning(f"User {user_id} attempted an admin action")
            raise NotAuthorizedError(f"User {user_id} is not an admin")
