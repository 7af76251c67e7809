import io
from collections.abc import Callable
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.uploads.models import IncomingFile

IncomingFactory = Callable[..., IncomingFile]


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF, standing in for a scanned ID."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "PlantBnB identity document")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def uploads_root(tmp_path: Path) -> Path:
    return tmp_path / "public" / "uploads"


@pytest.fixture()
def make_incoming(tmp_path: Path) -> IncomingFactory:
    """Write a temporary upload the way the web server would, and describe it."""
    incoming_dir = tmp_path / "incoming"
    incoming_dir.mkdir()
    counter = iter(range(1_000_000))

    def _make(
        filename: str = "passport.pdf",
        content_type: str = "application/pdf",
        content: bytes = b"%PDF-1.4 test",
        size: int | None = None,
        declared_size: int | None = None,
        transport_error: bool = False,
    ) -> IncomingFile:
        # size: bytes actually written; declared_size: what the transport reports.
        if size is not None:
            content = b"x" * size
        temp_path = incoming_dir / f"php{next(counter)}.tmp"
        temp_path.write_bytes(content)
        return IncomingFile(
            filename=filename,
            content_type=content_type,
            size=len(content) if declared_size is None else declared_size,
            temp_path=temp_path,
            transport_error=transport_error,
        )

    return _make
