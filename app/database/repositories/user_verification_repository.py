from typing import Any

from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.verification.exceptions import UserNotFoundError
from app.verification.models import VerificationRecord, VerificationSummary

_RECORD_COLUMNS = """
    user_id, username, email, is_verified,
    verification_document_path, created_at
"""


def _to_record(row: dict[str, Any]) -> VerificationRecord:
    return VerificationRecord(
        user_id=row["user_id"],
        username=row["username"],
        email=row["email"],
        is_verified=bool(row["is_verified"]),
        document_path=row["verification_document_path"],
        created_at=row["created_at"],
    )


class UserVerificationRepository:
    """Database operations on the verification columns of the users table."""

    def find_by_id(self, user_id: int) -> VerificationRecord:
        """Load the verification state of a user.

        Raises:
            UserNotFoundError: if no user with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_RECORD_COLUMNS} FROM users WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return _to_record(row)

    def find_role(self, user_id: int) -> str | None:
        """Return the user's role, or None for an unknown user."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT role FROM users WHERE user_id = %s", (user_id,))
                row = cur.fetchone()

        if row is None:
            return None
        return row[0]

    def list_pending(self) -> list[VerificationRecord]:
        """Users who submitted a document and await review, oldest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM users
                    WHERE verification_document_path IS NOT NULL
                      AND is_verified = FALSE
                    ORDER BY created_at, user_id
                    """
                )
                rows = cur.fetchall()

        return [_to_record(row) for row in rows]

    def summary(self) -> VerificationSummary:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        COUNT(*) AS total_users,
                        COUNT(*) FILTER (WHERE is_verified) AS verified_users,
                        COUNT(*) FILTER (
                            WHERE verification_document_path IS NOT NULL
                              AND NOT is_verified
                        ) AS pending_users
                    FROM users
                    """
                )
                row = cur.fetchone()

        if row is None:
            return VerificationSummary(total_users=0, verified_users=0, pending_users=0)
        return VerificationSummary(
            total_users=row["total_users"],
            verified_users=row["verified_users"],
            pending_users=row["pending_users"],
        )

    def set_document_path(self, user_id: int, document_path: str) -> None:
        """Attach a submitted document to the user.

        Raises:
            UserNotFoundError: if no user with this ID exists.
        """
        self._update(
            user_id,
            """
            UPDATE users
            SET verification_document_path = %s
            WHERE user_id = %s
            """,
            (document_path, user_id),
        )

    def mark_verified(self, user_id: int) -> None:
        """Raises UserNotFoundError if no user with this ID exists."""
        self._update(
            user_id,
            "UPDATE users SET is_verified = TRUE WHERE user_id = %s",
            (user_id,),
        )

    def clear_verification(self, user_id: int) -> None:
        """Reset the user to unverified and drop the document reference.

        Raises:
            UserNotFoundError: if no user with this ID exists.
        """
        self._update(
            user_id,
            """
            UPDATE users
            SET is_verified = FALSE,
                verification_document_path = NULL
            WHERE user_id = %s
            """,
            (user_id,),
        )

    def _update(self, user_id: int, sql: str, params: tuple[Any, ...]) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                if cur.rowcount == 0:
                    raise UserNotFoundError(f"User {user_id} not found")
            conn.commit()
