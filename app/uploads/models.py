from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class IncomingFile:
    """A file-bearing request field as handed over by the transport layer.

    ``content_type`` and ``size`` are what the client declared; ``temp_path``
    points at the temporary copy the transport wrote. Size limits are checked
    against that copy, not against ``size``. ``transport_error`` is set when
    the upload itself was truncated or aborted.
    """

    filename: str
    content_type: str
    size: int
    temp_path: Path
    transport_error: bool = False


@dataclass(frozen=True)
class UploadPolicy:
    """Where a category of uploads lives and what it accepts."""

    directory: str
    allowed_mime_types: frozenset[str]
    max_size_bytes: int


@dataclass(frozen=True)
class StoredUpload:
    """Successful upload. Only ``stored_path`` is meant to be persisted."""

    stored_path: str
    original_name: str
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class NoFile:
    """No usable file was submitted under the requested field."""

    field_name: str


class UploadErrorCode(str, Enum):
    TOO_LARGE = "too_large"
    UNSUPPORTED_TYPE = "unsupported_type"
    STORAGE_WRITE_FAILED = "storage_write_failed"


_MESSAGES = {
    UploadErrorCode.TOO_LARGE: "File size exceeds file size limit.",
    UploadErrorCode.UNSUPPORTED_TYPE: "File type not allowed.",
    UploadErrorCode.STORAGE_WRITE_FAILED: "Failed to save the uploaded file.",
}


@dataclass(frozen=True)
class UploadRejected:
    """The file was refused; nothing was written."""

    code: UploadErrorCode
    field_name: str

    @property
    def message(self) -> str:
        return _MESSAGES[self.code]


UploadResult = StoredUpload | NoFile | UploadRejected
