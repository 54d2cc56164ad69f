import io
from datetime import datetime

import pytest
from PyPDF2 import PdfReader

from modules.documents.models.document import DocumentStatus
from modules.documents.services.pdf_service import AssetMissingError, CorruptInputError, PdfService

TS = datetime(2024, 5, 17, 10, 30, 0)


def pages_of(data):
    return PdfReader(io.BytesIO(data)).pages


def test_page_count(pdf_service, make_pdf):
    assert pdf_service.page_count(make_pdf(pages=3)) == 3


def test_stamp_is_added_to_every_page(pdf_service, make_pdf):
    stamped = pdf_service.stamp_signature(make_pdf(pages=3), "000042", TS)

    pages = pages_of(stamped)
    assert len(pages) == 3
    for number, page in enumerate(pages, start=1):
        text = page.extract_text()
        assert "Signed electronically" in text
        assert "000042" in text
        assert f"Page {number}/3" in text


def test_stamp_keeps_original_content(pdf_service, make_pdf):
    stamped = pdf_service.stamp_signature(make_pdf(text="Quarterly report"), "000001", TS)
    assert "Quarterly report" in pages_of(stamped)[0].extract_text()


@pytest.mark.parametrize("outcome, label", [
    (DocumentStatus.FINAL_APPROVED, "FINAL APPROVED"),
    (DocumentStatus.REJECTED, "REJECTED"),
])
def test_outcome_page_is_appended(pdf_service, make_pdf, outcome, label):
    result = pdf_service.append_final_outcome_page(make_pdf(pages=2), outcome, TS)

    pages = pages_of(result)
    assert len(pages) == 3
    last = pages[-1].extract_text()
    assert label in last
    assert "2024-05-17 10:30:00" in last


@pytest.mark.parametrize("outcome", [
    DocumentStatus.DRAFT, DocumentStatus.SIGNED, DocumentStatus.WAITING_FOR_APPROVAL,
])
def test_outcome_page_rejects_non_final_status(pdf_service, make_pdf, outcome):
    with pytest.raises(ValueError):
        pdf_service.append_final_outcome_page(make_pdf(), outcome, TS)


@pytest.mark.parametrize("data", [b"", b"This is not a PDF docx"])
def test_corrupt_input(pdf_service, data):
    with pytest.raises(CorruptInputError):
        pdf_service.page_count(data)
    with pytest.raises(CorruptInputError):
        pdf_service.stamp_signature(data, "000001", TS)


def test_missing_image_asset(tmp_path, make_pdf):
    service = PdfService(str(tmp_path))
    with pytest.raises(AssetMissingError):
        service.append_final_outcome_page(make_pdf(), DocumentStatus.FINAL_APPROVED, TS)


def test_missing_font(tmp_path, make_pdf):
    service = PdfService(str(tmp_path), font_path=str(tmp_path / "nope.ttf"))
    with pytest.raises(AssetMissingError):
        service.stamp_signature(make_pdf(), "000001", TS)
