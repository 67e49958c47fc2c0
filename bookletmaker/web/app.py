from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from bookletmaker.constants import DEFAULT_MAX_UPLOAD_BYTES, FALLBACK_PAGE_SIZE, MAX_PLAN_PAGES, PDF_MEDIA_TYPE
from bookletmaker.imposition.assembler import run_booklet_job
from bookletmaker.imposition.core import Blank, CopySource, OutputPlan, PlacementEntry, impose_booklet
from bookletmaker.imposition.errors import AssemblyFailure, InvalidDocument
from bookletmaker.imposition.pdf_provider import PdfDocumentProvider, booklet_filename

_LOGGER = logging.getLogger("bookletmaker.web")


def _log_event(level: int, event_name: str, **event_fields: Any) -> None:
    _LOGGER.log(
        level,
        event_name,
        extra={"event_name": event_name, "event_fields": event_fields},
    )


def _validate_upload_metadata(file: UploadFile | None) -> tuple[str | None, str | None]:
    if file is None or not file.filename:
        return None, "Please select a PDF file to continue."

    source_name = Path(file.filename).name
    if Path(source_name).suffix.lower() != ".pdf":
        return None, "Please select a valid PDF file."

    return source_name, None


def _impose_payload(
    *,
    payload: bytes,
    source_name: str,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    job_id: str | None = None,
) -> tuple[dict[str, Any] | None, str | None]:
    if len(payload) > max_upload_bytes:
        _log_event(
            logging.WARNING,
            "impose.job.upload_too_large",
            job_id=job_id,
            source_name=source_name,
            payload_bytes=len(payload),
            max_upload_bytes=max_upload_bytes,
        )
        return None, f"The uploaded file exceeds the {max_upload_bytes // (1024 * 1024)} MB limit."

    try:
        provider = PdfDocumentProvider.from_bytes(payload)
    except InvalidDocument as exc:
        _log_event(
            logging.WARNING,
            "impose.job.invalid_pdf",
            job_id=job_id,
            source_name=source_name,
            payload_bytes=len(payload),
            error=str(exc),
        )
        return None, str(exc)

    try:
        job = run_booklet_job(provider)
    except Exception:
        _LOGGER.exception(
            "impose.job.unexpected_failure",
            extra={
                "event_name": "impose.job.unexpected_failure",
                "event_fields": {"job_id": job_id, "source_name": source_name},
            },
        )
        return None, "An error occurred while processing the PDF. Please try again."

    if isinstance(job.error, InvalidDocument):
        _log_event(
            logging.WARNING,
            "impose.job.invalid_document",
            job_id=job_id,
            source_name=source_name,
            state=job.state.value,
            error=str(job.error),
        )
        return None, "The PDF has no readable pages."

    if isinstance(job.error, AssemblyFailure):
        _log_event(
            logging.ERROR,
            "impose.job.assembly_failed",
            job_id=job_id,
            source_name=source_name,
            state=job.state.value,
            error=str(job.error),
        )
        return None, "An error occurred while processing the PDF. Please try again."

    if not job.ok or job.plan is None or job.payload is None:
        _log_event(logging.ERROR, "impose.job.missing_result", job_id=job_id, source_name=source_name)
        return None, "An error occurred while processing the PDF. Please try again."

    output_name = booklet_filename(source_name)
    _log_event(
        logging.INFO,
        "impose.job.completed",
        job_id=job_id,
        source_name=source_name,
        source_pages=job.plan.page_count,
        output_pages=len(job.plan),
        blank_pages=job.plan.blank_count,
        sheets=job.plan.sheet_count,
        output_bytes=len(job.payload),
    )
    return {
        "status": "success",
        "output_filename": output_name,
        "output_pages": len(job.plan),
        "sheets": job.plan.sheet_count,
        "payload": job.payload,
    }, None


def _describe_entry(entry: PlacementEntry) -> dict[str, Any]:
    if isinstance(entry, CopySource):
        return {"kind": "page", "index": entry.index}
    if isinstance(entry, Blank):
        return {"kind": "blank", "width": entry.width, "height": entry.height}
    raise ValueError(f"unknown placement entry {entry!r}")


def _plan_summary(plan: OutputPlan) -> dict[str, Any]:
    return {
        "page_count": plan.page_count,
        "padded_count": len(plan),
        "sheet_count": plan.sheet_count,
        "blank_count": plan.blank_count,
        "positions": list(plan.positions),
        "sides": [
            {
                "sheet": side.sheet,
                "face": side.face,
                "left": _describe_entry(side.left),
                "right": _describe_entry(side.right),
            }
            for side in plan.sides()
        ],
    }


def create_app(max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> FastAPI:
    app = FastAPI(title="Booklet Maker", version="0.1.0")

    base_dir = Path(__file__).resolve().parent
    templates = Jinja2Templates(directory=str(base_dir / "templates"))

    app.state.max_upload_bytes = max_upload_bytes
    app.state.templates = templates

    def render_index(
        request: Request,
        *,
        result: dict[str, Any] | None = None,
        status_code: int = 200,
    ) -> HTMLResponse:
        return templates.TemplateResponse(
            request=request,
            name="index.html",
            context={"result": result},
            status_code=status_code,
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request) -> HTMLResponse:
        return render_index(request)

    @app.get("/plan")
    def plan(page_count: int = Query(..., le=MAX_PLAN_PAGES)) -> dict[str, Any]:
        try:
            booklet_plan = impose_booklet(page_count, FALLBACK_PAGE_SIZE)
        except InvalidDocument as exc:
            _log_event(logging.WARNING, "plan.request.invalid_page_count", page_count=page_count)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _plan_summary(booklet_plan)

    @app.post("/impose", response_model=None)
    async def impose(
        request: Request,
        file: UploadFile | None = File(default=None),
    ) -> Response:
        job_id = uuid4().hex
        _log_event(
            logging.INFO,
            "impose.request.received",
            job_id=job_id,
            has_upload=file is not None and bool(file.filename),
        )

        source_name, upload_error = _validate_upload_metadata(file)
        if upload_error is not None or file is None or source_name is None:
            error = upload_error or "Please select a PDF file to continue."
            _log_event(logging.WARNING, "impose.request.upload_validation_failed", job_id=job_id, error=error)
            return render_index(
                request,
                result={"status": "error", "message": error},
                status_code=400,
            )

        payload = await file.read()
        result, impose_error = _impose_payload(
            payload=payload,
            source_name=source_name,
            max_upload_bytes=app.state.max_upload_bytes,
            job_id=job_id,
        )
        if impose_error is not None or result is None:
            error = impose_error or "An error occurred while processing the PDF. Please try again."
            _log_event(logging.WARNING, "impose.request.failed", job_id=job_id, source_name=source_name, error=error)
            return render_index(
                request,
                result={"status": "error", "message": error},
                status_code=400,
            )

        _log_event(
            logging.INFO,
            "impose.request.succeeded",
            job_id=job_id,
            source_name=source_name,
            output_filename=result["output_filename"],
            output_pages=result["output_pages"],
        )
        return Response(
            content=result["payload"],
            media_type=PDF_MEDIA_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{result["output_filename"]}"',
                "X-Booklet-Pages": str(result["output_pages"]),
                "X-Booklet-Sheets": str(result["sheets"]),
            },
        )

    return app


app = create_app()
