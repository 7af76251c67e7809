from app.config.settings import Settings
from app.database.repositories.user_verification_repository import (
    UserVerificationRepository,
)
from app.logging.logger import Log
from app.uploads.file_upload_service import FileUploadService
from app.uploads.policies import preview_kind
from app.verification.exceptions import NoDocumentSubmittedError
from app.verification.models import PendingReview, VerificationRecord, VerificationSummary


class AdminReviewAction:
    """Admin decisions on submitted verification documents.

    Callers are expected to have passed ``AdminGuard.require_admin`` first.
    """

    def __init__(
        self,
        repository: UserVerificationRepository,
        uploads: FileUploadService,
        settings: Settings,
    ) -> None:
        self._repository = repository
        self._uploads = uploads
        self._settings = settings

    def list_pending(self) -> list[VerificationRecord]:
        return self._repository.list_pending()

    def summary(self) -> VerificationSummary:
        return self._repository.summary()

    def review(self, user_id: int) -> PendingReview:
        """Open a user's submitted document for review.

        Raises:
            UserNotFoundError: if the user does not exist.
            NoDocumentSubmittedError: if there is nothing to review.
        """
        record = self._repository.find_by_id(user_id)
        if not record.document_path:
            raise NoDocumentSubmittedError(f"User {user_id} has no verification document")
        return PendingReview(record=record, preview_kind=preview_kind(record.document_path))

    def approve(self, user_id: int) -> VerificationRecord:
        """Mark the user verified. Approving twice has no further effect.

        Raises:
            UserNotFoundError: if the user does not exist.
            NoDocumentSubmittedError: if the user never submitted a document.
        """
        record = self._repository.find_by_id(user_id)
        if not record.document_path:
            raise NoDocumentSubmittedError(f"User {user_id} has no verification document")

        self._repository.mark_verified(user_id)
        Log.info(f"Approved verification of user {user_id}")
        return self._repository.find_by_id(user_id)

    def reject(self, user_id: int) -> VerificationRecord:
        """Return the user to unverified and forget their document.

        The stored file is kept unless ``delete_rejected_documents`` is set.

        Raises:
            UserNotFoundError: if the user does not exist.
        """
        previous = self._repository.find_by_id(user_id)
        self._repository.clear_verification(user_id)
        Log.info(f"Rejected verification of user {user_id}")

        if self._settings.delete_rejected_documents and previous.document_path:
            self._uploads.discard(previous.document_path)

        return self._repository.find_by_id(user_id)
