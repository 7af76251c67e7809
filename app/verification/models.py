from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from app.uploads.models import NoFile, StoredUpload, UploadRejected


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    APPROVED = "approved"


@dataclass(frozen=True)
class VerificationRecord:
    """Verification state of one user (subset of the users row)."""

    user_id: int
    username: str
    email: str
    is_verified: bool
    document_path: str | None = None
    created_at: datetime | None = None

    @property
    def status(self) -> VerificationStatus:
        if self.is_verified:
            return VerificationStatus.APPROVED
        if self.document_path:
            return VerificationStatus.PENDING
        return VerificationStatus.UNVERIFIED


@dataclass(frozen=True)
class VerificationSummary:
    """Counters shown on the admin dashboard."""

    total_users: int
    verified_users: int
    pending_users: int


@dataclass(frozen=True)
class PendingReview:
    """A record opened for review together with how its document is shown."""

    record: VerificationRecord
    preview_kind: str


@dataclass(frozen=True)
class Submitted:
    """The document was stored and the user is now pending review."""

    record: VerificationRecord
    upload: StoredUpload


@dataclass(frozen=True)
class AlreadyApproved:
    """The user is verified already; nothing was stored."""

    record: VerificationRecord


SubmissionResult = Submitted | AlreadyApproved | NoFile | UploadRejected
