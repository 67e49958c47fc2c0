from __future__ import annotations

import io
import re
from pathlib import Path

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from bookletmaker.constants import OUTPUT_FILENAME_PREFIX
from bookletmaker.imposition.errors import AssemblyFailure, InvalidDocument


def booklet_filename(source_name: str) -> str:
    stem = Path(source_name).stem.strip()
    if not stem:
        stem = "output"

    slug = re.sub(r"[^A-Za-z0-9]+", "_", stem).strip("_").lower()
    slug = slug or "output"
    return f"{OUTPUT_FILENAME_PREFIX}{slug}.pdf"


class PdfDocumentProvider:
    """Document operations backed by pypdf.

    Pages are read from ``reader`` and written to a ``PdfWriter`` that is
    replaced on every ``begin()``; the reader is never modified.
    """

    def __init__(self, reader: PdfReader) -> None:
        self._reader = reader
        self._writer = PdfWriter()

    def begin(self) -> None:
        """Start a new output document, discarding pages from any earlier assembly."""
        self._writer = PdfWriter()

    @classmethod
    def from_bytes(cls, payload: bytes) -> PdfDocumentProvider:
        if not payload:
            raise InvalidDocument("The uploaded file is empty.")

        try:
            reader = PdfReader(io.BytesIO(payload))
        except PdfReadError as exc:
            raise InvalidDocument(
                "The upload could not be parsed as a PDF. Verify the file is a valid, non-corrupted PDF and retry."
            ) from exc

        if reader.is_encrypted:
            raise InvalidDocument("Encrypted PDFs are not supported. Remove encryption and retry.")

        return cls(reader)

    def get_page_count(self) -> int:
        return len(self._reader.pages)

    def get_page_size(self, index: int) -> tuple[float, float]:
        mediabox = self._reader.pages[index].mediabox
        return float(mediabox.width), float(mediabox.height)

    def copy_page(self, index: int) -> PageObject:
        page_count = self.get_page_count()
        if not 0 <= index < page_count:
            raise AssemblyFailure(f"source page {index} out of range for a {page_count}-page document")
        return self._reader.pages[index]

    def create_blank_page(self, width: float, height: float) -> PageObject:
        return PageObject.create_blank_page(width=width, height=height)

    def append_page(self, handle: PageObject) -> None:
        self._writer.add_page(handle)

    def serialize(self) -> bytes:
        payload = io.BytesIO()
        self._writer.write(payload)
        return payload.getvalue()
