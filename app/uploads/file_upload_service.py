import re
import shutil
import time
from collections.abc import Iterable, Mapping
from pathlib import Path, PurePosixPath, PureWindowsPath

from app.logging.logger import Log
from app.uploads.models import (
    IncomingFile,
    NoFile,
    StoredUpload,
    UploadErrorCode,
    UploadRejected,
    UploadResult,
)
from app.uploads.policies import policy_for

STORED_PATH_PREFIX = "uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
# Leaves room for the token within the usual 255-byte filename limit.
MAX_NAME_LENGTH = 200


def _token() -> str:
    return f"{time.time_ns():x}"


def sanitize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a safe basename.

    Directory parts in either separator style are dropped, characters outside
    ``[A-Za-z0-9._-]`` become ``_`` and leading dots are removed. Names longer
    than MAX_NAME_LENGTH are cut, keeping the extension.
    """
    name = PureWindowsPath(filename).name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".") or "file"
    if len(name) > MAX_NAME_LENGTH:
        suffix = PurePosixPath(name).suffix[:16]
        name = name[: MAX_NAME_LENGTH - len(suffix)] + suffix
    return name


class FileUploadService:
    """Validates uploaded files and moves them under the uploads root.

    Stored references look like ``uploads/<directory>/<token>_<name>`` and are
    independent of where the uploads root lives on disk.
    """

    def __init__(self, uploads_root: Path) -> None:
        self._uploads_root = Path(uploads_root)

    @property
    def uploads_root(self) -> Path:
        return self._uploads_root

    def category_directory(self, category: str) -> Path:
        return self._uploads_root / policy_for(category).directory

    def store_for(
        self,
        files: Mapping[str, IncomingFile],
        field_name: str,
        category: str,
    ) -> UploadResult:
        """Store a field using the size and type rules of an upload category."""
        policy = policy_for(category)
        return self.store(
            files,
            field_name,
            self._uploads_root / policy.directory,
            policy.allowed_mime_types,
            policy.max_size_bytes,
        )

    def store(
        self,
        files: Mapping[str, IncomingFile],
        field_name: str,
        target_directory: Path,
        allowed_mime_types: Iterable[str],
        max_size_bytes: int,
    ) -> UploadResult:
        """Validate the file under ``field_name`` and move it into place.

        Returns:
            StoredUpload on success, NoFile when nothing usable was sent, or
            UploadRejected with the reason. At most one file is written, and
            only on success.

        Raises:
            ValueError: if ``target_directory`` is not under the uploads root.
        """
        incoming = files.get(field_name)
        if incoming is None or incoming.transport_error:
            return NoFile(field_name)

        try:
            size = incoming.temp_path.stat().st_size
        except OSError as exc:
            Log.error(f"Cannot read temporary upload '{incoming.filename}': {exc}")
            return UploadRejected(UploadErrorCode.STORAGE_WRITE_FAILED, field_name)

        if size > max_size_bytes:
            Log.info(
                f"Rejected upload '{incoming.filename}' on '{field_name}': "
                f"{size} bytes exceeds {max_size_bytes}"
            )
            return UploadRejected(UploadErrorCode.TOO_LARGE, field_name)

        if incoming.content_type not in set(allowed_mime_types):
            Log.info(
                f"Rejected upload '{incoming.filename}' on '{field_name}': "
                f"type '{incoming.content_type}' not allowed"
            )
            return UploadRejected(UploadErrorCode.UNSUPPORTED_TYPE, field_name)

        target = Path(target_directory)
        relative_dir = self._relative_directory(target)
        destination: Path | None = None

        try:
            target.mkdir(parents=True, exist_ok=True)
            name = self._unique_name(target, sanitize_filename(incoming.filename))
            destination = target / name
            shutil.move(str(incoming.temp_path), str(destination))
        except OSError as exc:
            Log.error(f"Failed to store upload '{incoming.filename}' in {target}: {exc}")
            if destination is not None:
                self._drop_partial(destination)
            return UploadRejected(UploadErrorCode.STORAGE_WRITE_FAILED, field_name)

        stored_path = PurePosixPath(STORED_PATH_PREFIX, *relative_dir.parts, name).as_posix()
        Log.info(f"Stored upload '{incoming.filename}' as {stored_path}")
        return StoredUpload(
            stored_path=stored_path,
            original_name=incoming.filename,
            mime_type=incoming.content_type,
            size_bytes=size,
        )

    def resolve(self, stored_path: str) -> Path:
        """Map a stored reference back to its location on disk.

        Raises:
            ValueError: if the reference is malformed or escapes the uploads root.
        """
        parts = PurePosixPath(stored_path).parts
        if len(parts) < 2 or parts[0] != STORED_PATH_PREFIX:
            raise ValueError(f"Not an uploads reference: {stored_path!r}")

        root = self._uploads_root.resolve()
        candidate = root.joinpath(*parts[1:]).resolve()
        if root not in candidate.parents:
            raise ValueError(f"Reference escapes the uploads root: {stored_path!r}")
        return candidate

    def discard(self, stored_path: str) -> bool:
        """Delete a stored file. Returns False when nothing was deleted."""
        try:
            path = self.resolve(stored_path)
        except ValueError as exc:
            Log.warning(f"Not deleting unresolvable reference: {exc}")
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            Log.warning(f"Stored file already gone: {stored_path}")
            return False
        except OSError as exc:
            Log.error(f"Could not delete stored file {stored_path}: {exc}")
            return False
        Log.info(f"Deleted stored file {stored_path}")
        return True

    def _relative_directory(self, target: Path) -> PurePosixPath:
        root = self._uploads_root.resolve()
        try:
            relative = target.resolve().relative_to(root)
        except ValueError:
            raise ValueError(
                f"Upload directory {target} is outside uploads root {self._uploads_root}"
            ) from None
        return PurePosixPath(*relative.parts)

    @staticmethod
    def _unique_name(directory: Path, safe_name: str) -> str:
        # Time-derived token; retried until the name is free so nothing is overwritten.
        while True:
            candidate = f"{_token()}_{safe_name}"
            if not (directory / candidate).exists():
                return candidate

    @staticmethod
    def _drop_partial(destination: Path) -> None:
        try:
            destination.unlink(missing_ok=True)
        except OSError as exc:
            Log.warning(f"Could not remove partial upload {destination}: {exc}")
