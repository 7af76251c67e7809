import argparse
import mimetypes
import shutil
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

from app.auth.admin_guard import AdminGuard
from app.auth.exceptions import NotAuthorizedError
from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.exceptions import PersistenceError
from app.database.repositories.user_verification_repository import (
    UserVerificationRepository,
)
from app.logging.logger import Log
from app.uploads.file_upload_service import FileUploadService
from app.uploads.models import IncomingFile, NoFile, UploadRejected
from app.verification.admin_review import AdminReviewAction
from app.verification.exceptions import VerificationError
from app.verification.models import AlreadyApproved, Submitted, VerificationRecord
from app.verification.workflow import DOCUMENT_FIELD, VerificationWorkflow

ADMIN_COMMANDS = {"pending", "approve", "reject", "summary"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plantbnb-verification",
        description="Review and submit PlantBnB identity verification documents",
    )
    parser.add_argument("--as-user", type=int, help="ID of the acting admin")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("pending", help="List users awaiting review")
    commands.add_parser("summary", help="Show verification counters")

    show = commands.add_parser("show", help="Show a user's verification status")
    show.add_argument("user_id", type=int)

    approve = commands.add_parser("approve", help="Approve a submitted document")
    approve.add_argument("user_id", type=int)

    reject = commands.add_parser("reject", help="Reject a submitted document")
    reject.add_argument("user_id", type=int)

    submit = commands.add_parser("submit", help="Submit a document for a user")
    submit.add_argument("user_id", type=int)
    submit.add_argument("file", type=Path)
    submit.add_argument("--mime", help="Declared MIME type (guessed when omitted)")

    return parser


def _describe(record: VerificationRecord) -> str:
    document = record.document_path or "-"
    return f"{record.user_id}\t{record.username}\t{record.status.value}\t{document}"


def _incoming_copy(source: Path, mime: str | None) -> IncomingFile:
    """Copy a local file to a temporary location, the way a web upload arrives."""
    content_type = mime or mimetypes.guess_type(source.name)[0] or "application/octet-stream"
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        with source.open("rb") as src:
            shutil.copyfileobj(src, tmp)
    temp_path = Path(tmp.name)
    return IncomingFile(
        filename=source.name,
        content_type=content_type,
        size=temp_path.stat().st_size,
        temp_path=temp_path,
    )


def _submit(workflow: VerificationWorkflow, user_id: int, source: Path, mime: str | None) -> int:
    if not source.is_file():
        print(f"File not found: {source}", file=sys.stderr)
        return 1

    incoming = _incoming_copy(source, mime)
    try:
        outcome = workflow.submit(user_id, {DOCUMENT_FIELD: incoming})
    finally:
        incoming.temp_path.unlink(missing_ok=True)

    if isinstance(outcome, Submitted):
        print(_describe(outcome.record))
        return 0
    if isinstance(outcome, AlreadyApproved):
        print(f"User {user_id} is already verified")
        return 0
    if isinstance(outcome, UploadRejected):
        print(f"Verification document: {outcome.message}", file=sys.stderr)
        return 1
    if isinstance(outcome, NoFile):
        print("Please select an ID document to upload.", file=sys.stderr)
    return 1


def run(
    args: argparse.Namespace,
    workflow: VerificationWorkflow,
    review: AdminReviewAction,
    guard: AdminGuard,
) -> int:
    """Execute one parsed command and return the process exit code."""
    try:
        if args.command in ADMIN_COMMANDS:
            if args.as_user is None:
                print("--as-user is required for admin commands", file=sys.stderr)
                return 2
            guard.require_admin(args.as_user)

        if args.command == "pending":
            for record in review.list_pending():
                print(_describe(record))
        elif args.command == "summary":
            summary = review.summary()
            print(f"total users:    {summary.total_users}")
            print(f"verified users: {summary.verified_users}")
            print(f"pending users:  {summary.pending_users}")
        elif args.command == "show":
            print(_describe(workflow.status(args.user_id)))
        elif args.command == "approve":
            print(_describe(review.approve(args.user_id)))
        elif args.command == "reject":
            print(_describe(review.reject(args.user_id)))
        elif args.command == "submit":
            return _submit(workflow, args.user_id, args.file, args.mime)
    except (NotAuthorizedError, VerificationError, PersistenceError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse -> initialize pool -> build dependencies -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        repository = UserVerificationRepository()
        uploads = FileUploadService(settings.uploads_root)
        workflow = VerificationWorkflow(repository, uploads, settings)
        review = AdminReviewAction(repository, uploads, settings)
        guard = AdminGuard(repository)
        return run(args, workflow, review, guard)
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
