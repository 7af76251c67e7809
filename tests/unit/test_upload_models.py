import pytest

from app.uploads.models import UploadErrorCode, UploadRejected
from app.uploads.policies import (
    CARE_SHEET,
    LISTING_PHOTO,
    MB,
    PROFILE_PHOTO,
    UPLOAD_POLICIES,
    VERIFICATION,
    policy_for,
    preview_kind,
)
from app.verification.models import VerificationRecord, VerificationStatus


class TestUploadPolicies:
    def test_verification_accepts_images_and_pdf_up_to_five_mb(self) -> None:
        policy = policy_for(VERIFICATION)
        assert policy.allowed_mime_types == {"image/jpeg", "image/png", "application/pdf"}
        assert policy.max_size_bytes == 5 * MB
        assert policy.directory == "verification"

    def test_listing_photo(self) -> None:
        policy = policy_for(LISTING_PHOTO)
        assert policy.allowed_mime_types == {"image/jpeg", "image/png"}
        assert policy.max_size_bytes == 3 * MB

    def test_care_sheet(self) -> None:
        policy = policy_for(CARE_SHEET)
        assert policy.allowed_mime_types == {"application/pdf"}
        assert policy.max_size_bytes == 3 * MB

    def test_profile_photo(self) -> None:
        assert policy_for(PROFILE_PHOTO).max_size_bytes == 2 * MB

    def test_directories_are_distinct(self) -> None:
        directories = [p.directory for p in UPLOAD_POLICIES.values()]
        assert len(set(directories)) == len(directories)


class TestPreviewKind:
    @pytest.mark.parametrize(
        ("path", "kind"),
        [
            ("uploads/verification/a_id.JPG", "image"),
            ("uploads/verification/a_id.jpeg", "image"),
            ("uploads/verification/a_id.png", "image"),
            ("uploads/verification/a_id.PDF", "pdf"),
            ("uploads/verification/a_id.tiff", "unknown"),
            ("uploads/verification/noext", "unknown"),
        ],
    )
    def test_classifies_by_extension(self, path: str, kind: str) -> None:
        assert preview_kind(path) == kind


class TestUploadRejected:
    def test_messages(self) -> None:
        assert UploadRejected(UploadErrorCode.TOO_LARGE, "f").message == (
            "File size exceeds file size limit."
        )
        assert UploadRejected(UploadErrorCode.UNSUPPORTED_TYPE, "f").message == (
            "File type not allowed."
        )
        assert UploadRejected(UploadErrorCode.STORAGE_WRITE_FAILED, "f").message == (
            "Failed to save the uploaded file."
        )


class TestVerificationStatus:
    def _record(self, is_verified: bool, document_path: str | None) -> VerificationRecord:
        return VerificationRecord(
            user_id=1,
            username="a",
            email="a@example.com",
            is_verified=is_verified,
            document_path=document_path,
        )

    def test_unverified_without_document(self) -> None:
        assert self._record(False, None).status is VerificationStatus.UNVERIFIED

    def test_empty_reference_counts_as_missing(self) -> None:
        assert self._record(False, "").status is VerificationStatus.UNVERIFIED

    def test_pending_with_document(self) -> None:
        assert self._record(False, "uploads/verification/x.pdf").status is (
            VerificationStatus.PENDING
        )

    def test_approved_when_flag_set(self) -> None:
        assert self._record(True, "uploads/verification/x.pdf").status is (
            VerificationStatus.APPROVED
        )
