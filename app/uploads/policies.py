from pathlib import PurePosixPath

from app.uploads.models import UploadPolicy

MB = 1024 * 1024

JPEG = "image/jpeg"
PNG = "image/png"
PDF = "application/pdf"

VERIFICATION = "verification"
LISTING_PHOTO = "listing_photo"
CARE_SHEET = "care_sheet"
PROFILE_PHOTO = "profile_photo"

UPLOAD_POLICIES: dict[str, UploadPolicy] = {
    VERIFICATION: UploadPolicy("verification", frozenset({JPEG, PNG, PDF}), 5 * MB),
    LISTING_PHOTO: UploadPolicy("listings", frozenset({JPEG, PNG}), 3 * MB),
    CARE_SHEET: UploadPolicy("caresheets", frozenset({PDF}), 3 * MB),
    PROFILE_PHOTO: UploadPolicy("profiles", frozenset({JPEG, PNG}), 2 * MB),
}

_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png"}


def policy_for(category: str) -> UploadPolicy:
    """Return the policy of an upload category.

    Raises:
        ValueError: for an unknown category.
    """
    try:
        return UPLOAD_POLICIES[category]
    except KeyError:
        raise ValueError(f"Unknown upload category: {category}") from None


def preview_kind(stored_path: str) -> str:
    """Classify a stored document as 'image', 'pdf' or 'unknown' by extension."""
    suffix = PurePosixPath(stored_path).suffix.lower()
    if suffix in _IMAGE_SUFFIXES:
        return "image"
    if suffix == ".pdf":
        return "pdf"
    return "unknown"
