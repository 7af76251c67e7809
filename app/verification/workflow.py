from collections.abc import Mapping

from app.config.settings import Settings
from app.database.exceptions import PersistenceError
from app.database.repositories.user_verification_repository import (
    UserVerificationRepository,
)
from app.logging.logger import Log
from app.uploads.file_upload_service import FileUploadService
from app.uploads.models import IncomingFile, StoredUpload
from app.uploads.policies import VERIFICATION
from app.verification.models import (
    AlreadyApproved,
    SubmissionResult,
    Submitted,
    VerificationRecord,
    VerificationStatus,
)

DOCUMENT_FIELD = "verification_document"


class VerificationWorkflow:
    """User-facing side of identity verification: check status, submit a document."""

    def __init__(
        self,
        repository: UserVerificationRepository,
        uploads: FileUploadService,
        settings: Settings,
    ) -> None:
        self._repository = repository
        self._uploads = uploads
        self._settings = settings

    def status(self, user_id: int) -> VerificationRecord:
        return self._repository.find_by_id(user_id)

    def submit(
        self,
        user_id: int,
        files: Mapping[str, IncomingFile],
    ) -> SubmissionResult:
        """Store the submitted document and move the user to pending.

        A pending user may resubmit; the new document replaces the old
        reference. Approved users are left untouched.

        Raises:
            UserNotFoundError: if the user does not exist.
            PersistenceError: if the reference could not be saved.
        """
        record = self._repository.find_by_id(user_id)
        if record.status is VerificationStatus.APPROVED:
            Log.info(f"User {user_id} is already verified, submission ignored")
            return AlreadyApproved(record)

        outcome = self._uploads.store_for(files, DOCUMENT_FIELD, VERIFICATION)
        if not isinstance(outcome, StoredUpload):
            return outcome

        try:
            self._repository.set_document_path(user_id, outcome.stored_path)
        except PersistenceError:
            Log.error(f"Could not record verification document for user {user_id}")
            if self._settings.cleanup_orphaned_uploads:
                self._uploads.discard(outcome.stored_path)
            raise

        Log.info(f"User {user_id} submitted {outcome.stored_path} for verification")
        return Submitted(self._repository.find_by_id(user_id), outcome)
