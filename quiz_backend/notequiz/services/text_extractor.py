"""
PDF text extraction.

Text is read from the PDF's embedded text layer first. Scanned documents have
no such layer, so when it comes back blank the pages are rasterized and run
through Tesseract OCR instead.
"""

import logging
from typing import List

import pytesseract
from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from notequiz.errors import ExtractionError

logger = logging.getLogger(__name__)

# Suppress verbose warnings from malformed PDFs and image decoding
logging.getLogger("pypdf").setLevel(logging.ERROR)
logging.getLogger("PIL").setLevel(logging.ERROR)


def _read_text_layer(path: str) -> str:
    """Return the embedded text of every page, joined with newlines."""
    with open(path, "rb") as fh:
        try:
            reader = PdfReader(fh)
            parts: List[str] = [page.extract_text() or "" for page in reader.pages]
        except PdfReadError as exc:
            raise ExtractionError(f"{path} is not a readable PDF: {exc}") from exc
    return "\n".join(parts)


def _ocr_pages(path: str, language: str) -> str:
    """Rasterize each page and return the recognized text, joined with newlines."""
    try:
        images = convert_from_path(path)
        parts = [pytesseract.image_to_string(image, lang=language) for image in images]
    except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as exc:
        raise ExtractionError(f"could not rasterize {path} for OCR: {exc}") from exc
    except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as exc:
        raise ExtractionError(f"OCR failed for {path}: {exc}") from exc
    return "\n".join(parts)


# PUBLIC_INTERFACE
def extract_text(path: str, language: str = "eng") -> str:
    """
    Extract the textual content of a PDF.

    Args:
        path: Filesystem path of the PDF.
        language: Tesseract language model used by the OCR fallback.

    Returns:
        str: The embedded text, returned verbatim when it is not blank;
             otherwise the OCR output.

    Raises:
        OSError: The file cannot be opened.
        ExtractionError: The file is not a PDF, OCR failed, or neither
            method produced any text.
    """
    text = _read_text_layer(path)
    if text.strip():
        return text

    logger.info("No text layer in %s; falling back to OCR (%s)", path, language)
    text = _ocr_pages(path, language)
    if not text.strip():
        raise ExtractionError(f"no text could be extracted from {path}")
    return text
