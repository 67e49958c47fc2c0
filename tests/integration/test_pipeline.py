from __future__ import annotations

import io

import pytest
from pypdf import PdfReader, PdfWriter

from bookletmaker.imposition.assembler import PipelineState, run_booklet_job
from bookletmaker.imposition.core import Blank, CopySource
from bookletmaker.imposition.errors import InvalidDocument
from bookletmaker.imposition.pdf_provider import PdfDocumentProvider

pytestmark = pytest.mark.integration


def _numeric_pdf_bytes(page_count: int) -> bytes:
    writer = PdfWriter()
    for index in range(page_count):
        writer.add_blank_page(width=300 + index, height=500)
    payload = io.BytesIO()
    writer.write(payload)
    return payload.getvalue()


def _source_index(width: float) -> int:
    return round(width) - 300


@pytest.mark.parametrize("page_count", [1, 4, 7, 8, 9, 16])
def test_pipeline_output_follows_plan(page_count: int) -> None:
    provider = PdfDocumentProvider.from_bytes(_numeric_pdf_bytes(page_count))

    result = run_booklet_job(provider)

    assert result.ok
    assert result.plan is not None
    assert result.payload is not None
    output = PdfReader(io.BytesIO(result.payload))
    assert len(output.pages) == len(result.plan)

    for entry, page in zip(result.plan.entries, output.pages):
        if isinstance(entry, CopySource):
            assert _source_index(float(page.mediabox.width)) == entry.index
        else:
            assert isinstance(entry, Blank)
            assert float(page.mediabox.width) == pytest.approx(300.0)


def test_pipeline_nine_pages_places_first_sheet_outermost() -> None:
    provider = PdfDocumentProvider.from_bytes(_numeric_pdf_bytes(9))

    result = run_booklet_job(provider)

    assert result.plan is not None
    assert result.plan.positions[:4] == (12, 1, 2, 11)
    assert result.plan.entries[:4] == (
        Blank(width=300.0, height=500.0),
        CopySource(0),
        CopySource(1),
        Blank(width=300.0, height=500.0),
    )


def test_pipeline_reports_zero_page_document_as_failed_state() -> None:
    writer = PdfWriter()
    payload = io.BytesIO()
    writer.write(payload)
    provider = PdfDocumentProvider.from_bytes(payload.getvalue())

    result = run_booklet_job(provider)

    assert result.state is PipelineState.FAILED
    assert isinstance(result.error, InvalidDocument)
    assert result.payload is None
