"""
PdfService: the lifecycle mutations applied to a stored PDF.

    - stamp_signature: footer stamp on every page at signing time
    - append_final_outcome_page: one extra page with the final verdict

Both take raw bytes and return new raw bytes; where the file lives is the
caller's business. Overlays and the outcome page are drawn with reportlab and
merged with PyPDF2.
"""
import io
import logging
import os
from datetime import datetime
from typing import Optional

from PyPDF2 import PageObject, PdfReader, PdfWriter
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from modules.documents.models.document import DocumentStatus

logger = logging.getLogger(__name__)

STAMP_FONT_NAME = "StampFont"

OUTCOME_STYLES = {
    DocumentStatus.FINAL_APPROVED: ("FINAL APPROVED", (0, 0.5, 0), "approved.png"),
    DocumentStatus.REJECTED: ("REJECTED", (0.8, 0, 0), "rejected.png"),
}


class PdfError(Exception):
    pass


class CorruptInputError(PdfError):
    """The bytes are not a PDF we can read"""
    pass


class AssetMissingError(PdfError):
    """A font or image needed for rendering could not be loaded"""
    pass


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime("%Y-%m-%d %H:%M:%S UTC")


class PdfService:

    def __init__(self, assets_dir: str, font_path: Optional[str] = None):
        self.assets_dir = assets_dir
        self.font_path = font_path
        self._font_registered = False

    def page_count(self, pdf_bytes: bytes) -> int:
        return len(self._load(pdf_bytes).pages)

    def stamp_signature(self, pdf_bytes: bytes, case_id: str, timestamp: datetime) -> bytes:
        font = self._font()
        reader = self._load(pdf_bytes)
        label = f"Signed electronically (prototype) | Case ID: {case_id} | {format_timestamp(timestamp)}"

        try:
            writer = PdfWriter()
            total = len(reader.pages)
            for index, page in enumerate(reader.pages):
                box = page.mediabox
                overlay = self._render_stamp(
                    float(box.left), float(box.bottom), float(box.width), float(box.height),
                    label, f"Page {index + 1}/{total} - electronically signed", font
                )
                page.merge_page(overlay)
                writer.add_page(page)
            logger.debug("Stamped %d page(s) for case %s", total, case_id)
            return self._to_bytes(writer)
        except Exception as e:
            raise CorruptInputError(f"Could not stamp PDF: {e}") from e

    def append_final_outcome_page(self, pdf_bytes: bytes, outcome: DocumentStatus, timestamp: datetime) -> bytes:
        if outcome not in OUTCOME_STYLES:
            raise ValueError(f"Outcome must be a terminal status, got {outcome!r}")
        label, color, image_name = OUTCOME_STYLES[outcome]
        image = self._image(image_name)
        font = self._font()
        bold_font = font if self.font_path else "Helvetica-Bold"
        reader = self._load(pdf_bytes)

        outcome_page = self._render_outcome_page(label, color, image, timestamp, font, bold_font)
        try:
            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)
            writer.add_page(outcome_page)
            return self._to_bytes(writer)
        except Exception as e:
            raise CorruptInputError(f"Could not append outcome page: {e}") from e

    # ---- helpers ---- #
    def _load(self, pdf_bytes: bytes) -> PdfReader:
        if not pdf_bytes:
            raise CorruptInputError("Empty file")
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            if reader.is_encrypted:
                raise CorruptInputError("Encrypted PDFs are not supported")
            if len(reader.pages) == 0:
                raise CorruptInputError("PDF has no pages")
        except CorruptInputError:
            raise
        except Exception as e:
            raise CorruptInputError(f"Invalid or damaged PDF: {e}") from e
        return reader

    def _font(self) -> str:
        if not self.font_path:
            return "Helvetica"
        if not self._font_registered:
            try:
                pdfmetrics.registerFont(TTFont(STAMP_FONT_NAME, self.font_path))
            except Exception as e:
                raise AssetMissingError(f"Could not load font {self.font_path}: {e}") from e
            self._font_registered = True
        return STAMP_FONT_NAME

    def _image(self, name: str) -> ImageReader:
        path = os.path.join(self.assets_dir, name)
        if not os.path.isfile(path):
            raise AssetMissingError(f"Image not found: {path}")
        try:
            image = ImageReader(path)
            image.getSize()
        except Exception as e:
            raise AssetMissingError(f"Could not load image {path}: {e}") from e
        return image

    @staticmethod
    def _to_bytes(writer: PdfWriter) -> bytes:
        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    @staticmethod
    def _render_stamp(left: float, bottom: float, width: float, height: float,
                      label: str, footer: str, font: str) -> PageObject:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(left + width, bottom + height))

        c.setFont(font, 9)
        c.setFillColorRGB(0, 0.53, 0.71)
        c.drawString(left + 50, bottom + 30, label)

        c.setFont(font, 8)
        c.setFillColorRGB(0.5, 0.5, 0.5)
        c.drawRightString(left + width - 20, bottom + 15, footer)

        c.showPage()
        c.save()
        return PdfReader(io.BytesIO(buf.getvalue())).pages[0]

    @staticmethod
    def _render_outcome_page(label: str, color, image: ImageReader, timestamp: datetime,
                             font: str, bold_font: str) -> PageObject:
        width, height = A4
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)

        c.setFont(bold_font, 24)
        c.setFillColorRGB(*color)
        c.drawString(50, height - 100, label)

        c.setFont(font, 12)
        c.setFillColorRGB(0.3, 0.3, 0.3)
        c.drawString(50, height - 140, f"Final decision: {format_timestamp(timestamp)}")

        # status glyph, centered
        image_size = 200
        c.drawImage(
            image,
            (width - image_size) / 2, (height - image_size) / 2,
            width=image_size, height=image_size,
            mask="auto", preserveAspectRatio=True,
        )

        c.showPage()
        c.save()
        return PdfReader(io.BytesIO(buf.getvalue())).pages[0]
