import io

import pytest
from reportlab.pdfgen import canvas

from config import ASSETS_DIR
from database import Database
import create_tables  # noqa: F401  registers every model
from modules.documents.services.pdf_service import PdfService
from modules.documents.storage import LocalFileStorage


def create_dummy_pdf_bytes(pages=1, text="PDF para test"):
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    for number in range(pages):
        c.drawString(50, 750, f"{text} - page {number + 1}")
        c.showPage()
    c.save()
    buf.seek(0)
    return buf.read()


@pytest.fixture
def make_pdf():
    return create_dummy_pdf_bytes


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'workflow.db'}").open()
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def pdf_service():
    return PdfService(ASSETS_DIR)
